"""HTTP API of the customers service."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI, HTTPException, Query, Response

from .auth import JWKSProvider, JWTAuthMiddleware
from ..api.customers_service import CustomersService
from ..config import CustomersServerConfig
from ..model.customer import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_ROW_INDEX,
    Customer,
    CustomerSpec,
    CustomersList,
    page_offset,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)

API_PREFIX = "/api/customers_mgmt/v1"
OPENAPI_PATH = f"{API_PREFIX}/openapi"
NUMERIC = r"^[0-9]+$"


def _paging_value(value: Optional[str], default: int) -> int:
    if value is None:
        return default
    digits = value.lstrip("0") or "0"
    if len(digits) > len(str(MAX_ROW_INDEX)):
        raise HTTPException(status_code=400, detail="page and size are out of range")
    return int(digits)


def create_customers_app(
    config: CustomersServerConfig,
    service: CustomersService,
    openapi_document: bytes,
    key_provider: Optional[JWKSProvider] = None,
) -> FastAPI:
    """Build the customers application.

    Outside demo mode every route except the OpenAPI document requires a
    bearer token signed by a key from ``config.jwk_certs_url``.
    """
    if not config.demo_mode and key_provider is None:
        key_provider = JWKSProvider(config.jwk_certs_url, ttl=config.jwks_cache_ttl)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await service.initialize()
        try:
            yield
        finally:
            await service.close()
            if key_provider is not None:
                await key_provider.aclose()

    app = FastAPI(
        title="Customers Service",
        lifespan=lifespan,
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
    )
    router = APIRouter(prefix=API_PREFIX)

    @router.get("/customers", response_model=CustomersList)
    async def list_customers(
        page: Optional[str] = Query(None, pattern=NUMERIC),
        size: Optional[str] = Query(None, pattern=NUMERIC),
    ):
        page_number = _paging_value(page, DEFAULT_PAGE)
        page_size = _paging_value(size, DEFAULT_PAGE_SIZE)
        if page_number < 1 or page_size < 1:
            raise HTTPException(status_code=400, detail="page and size must be greater than zero")
        if page_size > MAX_ROW_INDEX or page_offset(page_number, page_size) > MAX_ROW_INDEX:
            raise HTTPException(status_code=400, detail="page and size are out of range")
        return await service.list_customers(page_number, page_size)

    @router.post("/customers", response_model=Customer, status_code=201)
    async def add_customer(spec: CustomerSpec):
        return await service.create_customer(spec)

    @router.get("/customers/{customer_id}", response_model=Customer)
    async def get_customer(customer_id: str):
        customer = await service.get_customer(customer_id)
        if customer is None:
            raise HTTPException(status_code=404, detail=f"Customer '{customer_id}' not found")
        return customer

    @router.get("/openapi")
    async def get_openapi():
        return Response(content=openapi_document, media_type="application/json")

    app.include_router(router)

    if config.demo_mode:
        logger.info("Demo mode: serving demo data without authentication")
    else:
        app.add_middleware(
            JWTAuthMiddleware,
            key_provider=key_provider,
            excluded_paths=[OPENAPI_PATH],
        )

    return app
