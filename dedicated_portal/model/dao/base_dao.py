"""Base DAO shared by the table-level data access objects."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ...database.connection import AsyncDatabaseConnection
from ...utils.logger import get_logger

logger = get_logger(__name__)


class BaseDAO(ABC):
    """Async DAO over a single table.

    Queries use ``:named`` parameters; the connection translates them for
    asyncpg, so one implementation serves SQLite and PostgreSQL.
    """

    # Columns defining a stable row order for paging.
    order_by = "id"

    def __init__(self, db_connection: AsyncDatabaseConnection):
        self.db = db_connection

    @abstractmethod
    def get_table_name(self) -> str:
        """Get the table name for this DAO."""
        pass

    async def find_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        """Find record by ID."""
        query = f"SELECT * FROM {self.get_table_name()} WHERE id = :id"
        return await self.db.fetch_one(query, {"id": record_id})

    async def find_all(self, limit: Optional[int] = None, offset: int = 0) -> List[Dict[str, Any]]:
        """Find all records in stable order, optionally one slice of them."""
        query = f"SELECT * FROM {self.get_table_name()} ORDER BY {self.order_by}"
        params: Dict[str, Any] = {}

        if limit:
            query += " LIMIT :limit OFFSET :offset"
            params = {"limit": limit, "offset": offset}

        return await self.db.fetch_all(query, params)

    async def count_all(self) -> int:
        """Count records."""
        result = await self.db.fetch_one(f"SELECT COUNT(*) AS count FROM {self.get_table_name()}")
        return result["count"] if result else 0

    async def insert(self, data: Dict[str, Any]) -> int:
        """Insert one record."""
        logger.debug(f"Inserting into {self.get_table_name()}: {data.get('id')}")
        return await self.db.insert(self.get_table_name(), data)
