"""HTTP tests for the clusters application."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from dedicated_portal.api.clusters_service import ClustersService
from dedicated_portal.exceptions import ProvisioningError
from dedicated_portal.model.cluster import Cluster, ClusterNodes
from dedicated_portal.server.clusters_app import API_PREFIX, create_clusters_app

CLUSTER = Cluster(id="5d0b7f4e-3c1a-4a53-9a7e-2f6b1c0d9e11", name="MyCluster", nodes=ClusterNodes(master=1, compute=2))


@pytest.fixture
def service():
    service = AsyncMock(spec=ClustersService)
    service.list_clusters.return_value = [CLUSTER]
    service.get_cluster.return_value = CLUSTER
    service.create_cluster.return_value = CLUSTER
    return service


@pytest.fixture
def client(service):
    with TestClient(create_clusters_app(service)) as client:
        yield client


class TestClustersApp:
    def test_list(self, client):
        response = client.get(f"{API_PREFIX}/clusters")

        assert response.status_code == 200
        assert response.json() == [CLUSTER.model_dump()]

    def test_create(self, client, service):
        body = {"name": "MyCluster", "nodes": {"master": 1, "infra": 0, "compute": 2}}

        response = client.post(f"{API_PREFIX}/clusters", json=body)

        assert response.status_code == 201
        assert response.json()["state"] == "installing"
        spec = service.create_cluster.call_args.args[0]
        assert spec.nodes.compute == 2

    def test_create_rejects_negative_nodes(self, client, service):
        response = client.post(f"{API_PREFIX}/clusters", json={"name": "x", "nodes": {"master": -1}})

        assert response.status_code == 422
        service.create_cluster.assert_not_called()

    def test_get(self, client, service):
        response = client.get(f"{API_PREFIX}/clusters/{CLUSTER.id}")

        assert response.status_code == 200
        service.get_cluster.assert_awaited_once_with(CLUSTER.id)

    def test_get_unknown(self, client, service):
        service.get_cluster.return_value = None

        response = client.get(f"{API_PREFIX}/clusters/missing")

        assert response.status_code == 404

    def test_provisioning_failure(self, client, service):
        service.create_cluster.side_effect = ProvisioningError(
            "Failed to create ClusterVersion object: (403) Forbidden"
        )

        response = client.post(f"{API_PREFIX}/clusters", json={"name": "MyCluster"})

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to create ClusterVersion object: (403) Forbidden"}

    def test_lifespan(self, service):
        with TestClient(create_clusters_app(service)):
            service.initialize.assert_awaited_once()
        service.close.assert_awaited_once()
