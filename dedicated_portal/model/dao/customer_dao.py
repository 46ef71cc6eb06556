"""DAO for customers table operations."""

from .base_dao import BaseDAO


class CustomerDAO(BaseDAO):
    """Data Access Object for the customers table."""

    order_by = "name, id"

    def get_table_name(self) -> str:
        return "customers"
