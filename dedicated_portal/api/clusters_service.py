"""Clusters service backed by SQL and the cluster provisioner."""

import asyncio
import uuid
from pathlib import Path
from typing import List, Optional

from ..database.connection import AsyncDatabaseConnection
from ..database.migrations import ensure_schema, migrations_dir
from ..exceptions import ProvisioningError
from ..k8s.provisioner import ClusterProvisioner
from ..model.cluster import CLUSTER_STATE_ERROR, Cluster, ClusterSpec
from ..model.dao.cluster_dao import ClusterDAO
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ClustersService:
    """High-level service for listing, creating and fetching clusters."""

    def __init__(
        self,
        db_connection: AsyncDatabaseConnection,
        provisioner: ClusterProvisioner,
        migrations: Optional[Path] = None,
    ):
        self.db = db_connection
        self.provisioner = provisioner
        self.migrations = migrations or migrations_dir("clusters")
        self.cluster_dao = ClusterDAO(db_connection)

    @classmethod
    def from_url(cls, database_url: str, provisioner: ClusterProvisioner) -> "ClustersService":
        return cls(AsyncDatabaseConnection(database_url), provisioner)

    async def initialize(self) -> None:
        """Connect and bring the schema up to date; blocks until done."""
        await self.db.connect()
        await ensure_schema(self.db, self.migrations)

    async def close(self) -> None:
        await self.db.disconnect()
        self.provisioner.close()

    async def list_clusters(self) -> List[Cluster]:
        rows = await self.cluster_dao.find_all()
        return [Cluster.from_row(row) for row in rows]

    async def get_cluster(self, cluster_id: str) -> Optional[Cluster]:
        row = await self.cluster_dao.find_by_id(cluster_id)
        return Cluster.from_row(row) if row else None

    async def create_cluster(self, spec: ClusterSpec) -> Cluster:
        """Store the cluster, then submit it to the provisioner.

        When provisioning fails the record stays stored in the ``error``
        state and the ``ProvisioningError`` is propagated to the caller.
        """
        cluster = Cluster(id=str(uuid.uuid4()), name=spec.name, nodes=spec.nodes)
        await self.cluster_dao.insert(cluster.to_row())
        logger.info(f"Stored cluster '{cluster.name}' with ID {cluster.id}")

        # The Kubernetes client is blocking; keep the event loop serving.
        try:
            await asyncio.to_thread(self.provisioner.provision, cluster)
        except ProvisioningError:
            await self.cluster_dao.update_state(cluster.id, CLUSTER_STATE_ERROR)
            logger.warning(f"Cluster {cluster.id} marked as {CLUSTER_STATE_ERROR}")
            raise
        return cluster
