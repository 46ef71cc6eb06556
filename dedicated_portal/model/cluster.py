"""Cluster-related models."""

from typing import Any, Dict, List

from pydantic import BaseModel, Field

# A cluster is reported as installing once its ClusterDeployment was accepted
# by the API server. Readiness is owned by the Cluster-Operator controller.
CLUSTER_STATE_INSTALLING = "installing"
# The API server rejected the custom resources; nothing is being installed.
CLUSTER_STATE_ERROR = "error"


class ClusterNodes(BaseModel):
    """Node counts per machine-set role."""

    master: int = Field(default=0, ge=0)
    infra: int = Field(default=0, ge=0)
    compute: int = Field(default=0, ge=0)


class ClusterSpec(BaseModel):
    """Body of a cluster creation request."""

    name: str
    nodes: ClusterNodes = Field(default_factory=ClusterNodes)

    @property
    def resource_name(self) -> str:
        """Name of the Kubernetes objects backing this cluster."""
        return self.name.lower()


class Cluster(ClusterSpec):
    """A cluster known to the clusters service."""

    id: str
    state: str = CLUSTER_STATE_INSTALLING

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Cluster":
        return cls(
            id=row["id"],
            name=row["name"],
            state=row["state"],
            nodes=ClusterNodes(
                master=row["master_nodes"],
                infra=row["infra_nodes"],
                compute=row["compute_nodes"],
            ),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "master_nodes": self.nodes.master,
            "infra_nodes": self.nodes.infra,
            "compute_nodes": self.nodes.compute,
            "state": self.state,
        }


ClusterList = List[Cluster]
