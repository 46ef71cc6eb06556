"""DAO for clusters table operations."""

from .base_dao import BaseDAO


class ClusterDAO(BaseDAO):
    """Data Access Object for the clusters table."""

    order_by = "created_at, id"

    def get_table_name(self) -> str:
        return "clusters"

    async def update_state(self, cluster_id: str, state: str) -> int:
        """Set the state of one cluster."""
        return await self.db.execute(
            "UPDATE clusters SET state = :state WHERE id = :id", {"state": state, "id": cluster_id}
        )
