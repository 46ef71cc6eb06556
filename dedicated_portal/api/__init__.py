"""Service layer of the dedicated portal backends."""

from .clusters_service import ClustersService
from .customers_service import CustomersService, DemoCustomersService, SQLCustomersService

__all__ = ["ClustersService", "CustomersService", "DemoCustomersService", "SQLCustomersService"]
