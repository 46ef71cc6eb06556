"""Data Access Object (DAO) layer for database operations."""

from .base_dao import BaseDAO
from .cluster_dao import ClusterDAO
from .customer_dao import CustomerDAO

__all__ = ["BaseDAO", "ClusterDAO", "CustomerDAO"]
