"""Kubernetes client wrapper."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from ..exceptions import ConfigurationError
from ..model.provisioning import CLUSTER_OPERATOR_GROUP, CLUSTER_OPERATOR_VERSION
from ..utils.logger import get_logger

logger = get_logger(__name__)

CLUSTER_VERSIONS = "clusterversions"
CLUSTER_DEPLOYMENTS = "clusterdeployments"

# An error status from the API server, or a transport error from urllib3.
API_ERRORS = (ApiException, HTTPError)


def resolve_kubeconfig_path(kubeconfig: Optional[str] = None) -> Optional[Path]:
    """Find the Kubernetes client configuration file.

    The loading order follows these rules:

    1. If the ``--kubeconfig`` flag is set, only that file is used.
    2. If ``$KUBECONFIG`` is set, use it.
    3. Otherwise ``~/.kube/config`` is used.

    Returns ``None`` when the file doesn't exist, meaning the caller should
    use the in-cluster configuration of the pod.
    """
    if kubeconfig:
        path = Path(kubeconfig)
    elif os.environ.get("KUBECONFIG"):
        path = Path(os.environ["KUBECONFIG"])
    else:
        path = Path.home() / ".kube" / "config"

    if not path.exists():
        logger.info(f"The Kubernetes configuration file '{path}' doesn't exist")
        return None
    if path.is_dir():
        raise ConfigurationError(f"The Kubernetes configuration path '{path}' is a directory")
    if not os.access(path, os.R_OK):
        raise ConfigurationError(f"Can't open Kubernetes configuration file '{path}'")
    return path


def describe_api_error(error: Exception) -> str:
    """Short one-line description of a failed API call."""
    if isinstance(error, ApiException):
        return f"({error.status}) {error.reason}"
    return f"{type(error).__name__}: {error}"


class K8sClient:
    """Wrapper for the Cluster-Operator custom resource API."""

    def __init__(self, api_client: client.ApiClient):
        self.api_client = api_client
        self.custom_objects = client.CustomObjectsApi(api_client)

    @classmethod
    def from_kubeconfig(
        cls, kubeconfig: Optional[str] = None, master: Optional[str] = None
    ) -> "K8sClient":
        """Build a client from a kubeconfig file or the in-cluster configuration.

        ``master`` overrides the API server address found in the configuration.
        """
        configuration = client.Configuration()
        path = resolve_kubeconfig_path(kubeconfig)

        try:
            if path is not None:
                config.load_kube_config(
                    config_file=str(path), client_configuration=configuration
                )
                logger.info(f"Loaded Kubernetes configuration from '{path}'")
            else:
                logger.info("Try to use the in-cluster configuration")
                config.load_incluster_config(client_configuration=configuration)
        except config.ConfigException as e:
            source = f"file '{path}'" if path is not None else "in-cluster environment"
            raise ConfigurationError(f"Error loading REST client configuration from {source}: {e}")

        if master:
            configuration.host = master

        logger.info(f"Using Kubernetes API server {configuration.host}")
        return cls(client.ApiClient(configuration))

    def get_custom_object(self, plural: str, name: str, namespace: str) -> Dict[str, Any]:
        """Get a Cluster-Operator object; raises ``ApiException`` on failure."""
        logger.debug(f"Getting {plural}/{name} in namespace {namespace}")
        return self.custom_objects.get_namespaced_custom_object(
            group=CLUSTER_OPERATOR_GROUP,
            version=CLUSTER_OPERATOR_VERSION,
            namespace=namespace,
            plural=plural,
            name=name,
        )

    def create_custom_object(self, plural: str, body: Dict[str, Any], namespace: str) -> Dict[str, Any]:
        """Create a Cluster-Operator object; raises ``ApiException`` on failure."""
        logger.debug(f"Creating {plural}/{body['metadata']['name']} in namespace {namespace}")
        return self.custom_objects.create_namespaced_custom_object(
            group=CLUSTER_OPERATOR_GROUP,
            version=CLUSTER_OPERATOR_VERSION,
            namespace=namespace,
            plural=plural,
            body=body,
        )

    def close(self):
        self.api_client.close()
