"""Tests for the clusters service over a real SQLite database."""

from unittest.mock import Mock

import pytest

from dedicated_portal.api.clusters_service import ClustersService
from dedicated_portal.exceptions import ProvisioningError
from dedicated_portal.k8s.provisioner import ClusterProvisioner
from dedicated_portal.model.cluster import (
    CLUSTER_STATE_ERROR,
    CLUSTER_STATE_INSTALLING,
    ClusterNodes,
    ClusterSpec,
)


@pytest.fixture
def provisioner():
    return Mock(spec=ClusterProvisioner)


@pytest.fixture
async def service(sqlite_url, provisioner):
    clusters = ClustersService.from_url(sqlite_url, provisioner)
    await clusters.initialize()
    yield clusters
    await clusters.close()


@pytest.mark.integration
class TestClustersService:
    async def test_empty_list(self, service):
        assert await service.list_clusters() == []

    async def test_create_stores_and_provisions(self, service, provisioner, sample_cluster_spec):
        cluster = await service.create_cluster(sample_cluster_spec)

        assert cluster.name == "MyCluster"
        assert cluster.state == CLUSTER_STATE_INSTALLING
        assert cluster.nodes == sample_cluster_spec.nodes
        provisioner.provision.assert_called_once_with(cluster)

    async def test_get_returns_stored_cluster(self, service, sample_cluster_spec):
        created = await service.create_cluster(sample_cluster_spec)

        assert await service.get_cluster(created.id) == created

    async def test_get_unknown_cluster(self, service):
        assert await service.get_cluster("does-not-exist") is None

    async def test_list_returns_every_cluster(self, service):
        first = await service.create_cluster(ClusterSpec(name="one"))
        second = await service.create_cluster(ClusterSpec(name="two", nodes=ClusterNodes(compute=1)))

        clusters = await service.list_clusters()

        assert {c.id for c in clusters} == {first.id, second.id}
        assert first.id != second.id

    async def test_provisioning_failure_marks_record_as_error(self, service, provisioner, sample_cluster_spec):
        provisioner.provision.side_effect = ProvisioningError("Failed to create ClusterDeployment object: (403) Forbidden")

        with pytest.raises(ProvisioningError):
            await service.create_cluster(sample_cluster_spec)

        stored = await service.list_clusters()
        assert [(c.name, c.state) for c in stored] == [("MyCluster", CLUSTER_STATE_ERROR)]
        assert (await service.get_cluster(stored[0].id)).state == CLUSTER_STATE_ERROR

    async def test_failure_leaves_other_clusters_installing(self, service, provisioner):
        healthy = await service.create_cluster(ClusterSpec(name="healthy"))
        provisioner.provision.side_effect = ProvisioningError("Failed to create ClusterVersion object: boom")

        with pytest.raises(ProvisioningError):
            await service.create_cluster(ClusterSpec(name="broken"))

        assert (await service.get_cluster(healthy.id)).state == CLUSTER_STATE_INSTALLING

    async def test_initialize_twice_is_safe(self, service):
        await service.initialize()

        assert await service.list_clusters() == []

    async def test_close_releases_provisioner(self, sqlite_url, provisioner):
        clusters = ClustersService.from_url(sqlite_url, provisioner)
        await clusters.initialize()

        await clusters.close()

        provisioner.close.assert_called_once()
