"""Test configuration and fixtures."""

import time
from typing import Any, Dict, Optional
from unittest.mock import Mock

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk, jwt
from kubernetes.client.rest import ApiException

from dedicated_portal.k8s.client import K8sClient
from dedicated_portal.model.cluster import ClusterNodes, ClusterSpec
from dedicated_portal.model.provisioning import ProvisionerSettings

pytest_plugins = ("pytest_asyncio",)

SIGNING_KEY_ID = "test-key"


def api_error(status: int, reason: str = "") -> ApiException:
    """An API status error as raised by the kubernetes client."""
    return ApiException(status=status, reason=reason or f"status {status}")


@pytest.fixture
def sample_cluster_spec():
    """Cluster spec with distinct node counts per role."""
    return ClusterSpec(name="MyCluster", nodes=ClusterNodes(master=3, infra=2, compute=5))


@pytest.fixture
def provisioner_settings():
    return ProvisionerSettings()


@pytest.fixture
def mock_k8s_client():
    """K8sClient mock where every object already exists and creates succeed."""
    client = Mock(spec=K8sClient)
    client.get_custom_object = Mock(return_value={"metadata": {"name": "origin-v3-10"}})
    client.create_custom_object = Mock(side_effect=lambda plural, body, namespace: body)
    return client


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite:///{tmp_path / 'portal.db'}"


def _generate_key_pair():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


@pytest.fixture(scope="session")
def signing_keys():
    """RSA key pair plus the JWK set publishing its public half."""
    private_pem, public_pem = _generate_key_pair()
    public_jwk = jwk.construct(public_pem, algorithm="RS256").to_dict()
    public_jwk["kid"] = SIGNING_KEY_ID
    public_jwk["use"] = "sig"
    return {"private": private_pem, "jwks": {"keys": [public_jwk]}}


@pytest.fixture(scope="session")
def foreign_private_key():
    """A private key absent from the published JWK set."""
    private_pem, _ = _generate_key_pair()
    return private_pem


def make_token(private_pem: str, claims: Optional[Dict[str, Any]] = None, expires_in: int = 300) -> str:
    payload = {"sub": "portal-user", "exp": int(time.time()) + expires_in}
    payload.update(claims or {})
    return jwt.encode(payload, private_pem, algorithm="RS256", headers={"kid": SIGNING_KEY_ID})


class StaticKeyProvider:
    """Key provider serving a fixed JWK set."""

    def __init__(self, keys: Dict[str, Any]):
        self.keys = keys
        self.closed = False

    async def get_keys(self) -> Dict[str, Any]:
        return self.keys

    async def aclose(self) -> None:
        self.closed = True
