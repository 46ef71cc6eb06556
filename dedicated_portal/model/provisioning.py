"""Settings for provisioning clusters through the Cluster-Operator."""

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import ConfigurationError

CLUSTER_OPERATOR_GROUP = "clusteroperator.openshift.io"
CLUSTER_OPERATOR_VERSION = "v1alpha1"
CLUSTER_OPERATOR_API_VERSION = f"{CLUSTER_OPERATOR_GROUP}/{CLUSTER_OPERATOR_VERSION}"


class _Settings(BaseModel):
    # Unknown keys in a settings file are errors, not silently ignored.
    model_config = ConfigDict(extra="forbid")


class ImageSettings(_Settings):
    """Images the Cluster-Operator uses to install a cluster version."""

    image_format: str = "openshift/origin-${component}:v3.10.0"
    openshift_ansible_image: str = "cluster-operator-ansible:canary"
    cluster_api_image: str = (
        "registry.svc.ci.openshift.org/openshift-cluster-operator/kubernetes-cluster-api:latest"
    )
    machine_controller_image: str = (
        "registry.svc.ci.openshift.org/openshift-cluster-operator/cluster-operator:latest"
    )
    pull_policy: str = "Never"


class ClusterVersionSettings(_Settings):
    """The shared ClusterVersion every ClusterDeployment refers to."""

    name: str = "origin-v3-10"
    version: str = "v3.10.0"
    deployment_type: str = "Origin"
    region: str = "us-east-1"
    ami: str = "ami-0dd8ad483cef75c18"
    images: ImageSettings = Field(default_factory=ImageSettings)


class NetworkSettings(_Settings):
    service_cidr_blocks: List[str] = ["172.30.0.0/16"]
    pod_cidr_blocks: List[str] = ["172.30.0.0/14"]


class AWSSettings(_Settings):
    """Cloud account and hardware references of provisioned clusters."""

    account_secret: str = "aws-creds"
    ssh_secret: str = "ssh-secret"
    ssl_secret: str = "ssl-certs"
    ssh_user: str = "centos"
    region: str = "us-east-1"
    key_pair_name: str = "libra"
    instance_type: str = "t2.xlarge"


class ProvisionerSettings(_Settings):
    """Every infrastructure literal the provisioner writes into custom resources."""

    namespace: str = "dedicated-portal"
    cluster_version: ClusterVersionSettings = Field(default_factory=ClusterVersionSettings)
    network: NetworkSettings = Field(default_factory=NetworkSettings)
    aws: AWSSettings = Field(default_factory=AWSSettings)

    @classmethod
    def from_yaml(cls, path: Optional[Path]) -> "ProvisionerSettings":
        """Load settings from a YAML file; ``None`` yields the defaults."""
        if path is None:
            return cls()

        path = Path(path)
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigurationError(f"Can't read provisioner configuration '{path}': {e}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid provisioner configuration '{path}': {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Provisioner configuration '{path}' must be a mapping")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid provisioner configuration '{path}': {e}")
