"""Customers services: SQL-backed and in-memory demo implementations."""

import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from ..database.connection import AsyncDatabaseConnection
from ..database.migrations import ensure_schema, migrations_dir
from ..model.customer import Customer, CustomerSpec, CustomersList, page_offset
from ..model.dao.customer_dao import CustomerDAO
from ..utils.logger import get_logger

logger = get_logger(__name__)


class CustomersService(ABC):
    """Capabilities shared by every customers backing store."""

    async def initialize(self) -> None:
        """Prepare the store before the first request."""

    @abstractmethod
    async def list_customers(self, page: int, size: int) -> CustomersList:
        pass

    @abstractmethod
    async def create_customer(self, spec: CustomerSpec) -> Customer:
        pass

    @abstractmethod
    async def get_customer(self, customer_id: str) -> Optional[Customer]:
        pass

    async def close(self) -> None:
        """Release the store's resources."""


class SQLCustomersService(CustomersService):
    """Customers stored in the customers table."""

    def __init__(self, db_connection: AsyncDatabaseConnection, migrations: Optional[Path] = None):
        self.db = db_connection
        self.migrations = migrations or migrations_dir("customers")
        self.customer_dao = CustomerDAO(db_connection)

    @classmethod
    def from_url(cls, database_url: str) -> "SQLCustomersService":
        return cls(AsyncDatabaseConnection(database_url))

    async def initialize(self) -> None:
        await self.db.connect()
        await ensure_schema(self.db, self.migrations)

    async def close(self) -> None:
        await self.db.disconnect()

    async def list_customers(self, page: int, size: int) -> CustomersList:
        rows = await self.customer_dao.find_all(limit=size, offset=page_offset(page, size))
        total = await self.customer_dao.count_all()
        return CustomersList(
            page=page,
            size=size,
            total=total,
            items=[Customer.from_row(row) for row in rows],
        )

    async def create_customer(self, spec: CustomerSpec) -> Customer:
        customer = Customer(id=str(uuid.uuid4()), **spec.model_dump())
        await self.customer_dao.insert(customer.model_dump())
        logger.info(f"Created customer '{customer.name}' with ID {customer.id}")
        return customer

    async def get_customer(self, customer_id: str) -> Optional[Customer]:
        row = await self.customer_dao.find_by_id(customer_id)
        return Customer.from_row(row) if row else None


DEMO_CUSTOMERS = [
    Customer(id="01c9e5e3-5b2c-4c5e-9f43-5d0d2b1a0a01", name="Acme Corporation", owner_id="demo-owner"),
    Customer(id="6c1f4d2e-8a7b-4e39-9b1e-0f6a2c3d4e02", name="Globex", owner_id="demo-owner"),
    Customer(id="a2b3c4d5-e6f7-4a8b-9c0d-1e2f3a4b5c03", name="Initech", owner_id="demo-owner"),
    Customer(id="d4e5f6a7-b8c9-4d0e-8f1a-2b3c4d5e6f04", name="Umbrella", owner_id="demo-owner"),
]


class DemoCustomersService(CustomersService):
    """Fixed in-memory customers served in demo mode."""

    def __init__(self, customers: Optional[List[Customer]] = None):
        source = DEMO_CUSTOMERS if customers is None else customers
        self._customers = [customer.model_copy() for customer in source]

    def _ordered(self) -> List[Customer]:
        return sorted(self._customers, key=lambda c: (c.name, c.id))

    async def list_customers(self, page: int, size: int) -> CustomersList:
        ordered = self._ordered()
        start = page_offset(page, size)
        return CustomersList(
            page=page, size=size, total=len(ordered), items=ordered[start : start + size]
        )

    async def create_customer(self, spec: CustomerSpec) -> Customer:
        customer = Customer(id=str(uuid.uuid4()), **spec.model_dump())
        self._customers.append(customer)
        return customer

    async def get_customer(self, customer_id: str) -> Optional[Customer]:
        for customer in self._customers:
            if customer.id == customer_id:
                return customer
        return None
