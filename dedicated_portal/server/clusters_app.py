"""HTTP API of the clusters service."""

from contextlib import asynccontextmanager
from typing import List

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from ..api.clusters_service import ClustersService
from ..exceptions import ProvisioningError
from ..model.cluster import Cluster, ClusterSpec
from ..utils.logger import get_logger

logger = get_logger(__name__)

API_PREFIX = "/api/clusters_mgmt/v1"


def create_clusters_app(service: ClustersService) -> FastAPI:
    """Build the clusters application around a clusters service."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await service.initialize()
        try:
            yield
        finally:
            await service.close()

    app = FastAPI(
        title="Clusters Service",
        lifespan=lifespan,
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
    )
    router = APIRouter(prefix=API_PREFIX)

    @router.get("/clusters", response_model=List[Cluster])
    async def list_clusters():
        return await service.list_clusters()

    @router.post("/clusters", response_model=Cluster, status_code=201)
    async def create_cluster(spec: ClusterSpec):
        """Create a cluster.

        A 201 means the ClusterDeployment was accepted by Kubernetes, not that
        the cluster finished installing.
        """
        return await service.create_cluster(spec)

    @router.get("/clusters/{uuid}", response_model=Cluster)
    async def get_cluster(uuid: str):
        cluster = await service.get_cluster(uuid)
        if cluster is None:
            raise HTTPException(status_code=404, detail=f"Cluster '{uuid}' not found")
        return cluster

    @app.exception_handler(ProvisioningError)
    async def provisioning_error_handler(request: Request, exc: ProvisioningError):
        logger.error(f"Provisioning failed for {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"detail": exc.message})

    app.include_router(router)
    return app
