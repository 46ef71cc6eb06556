"""Builders for the Cluster-Operator custom resources."""

from typing import Any, Dict, List

from ..model.cluster import ClusterNodes, ClusterSpec
from ..model.provisioning import CLUSTER_OPERATOR_API_VERSION, ProvisionerSettings

NODE_TYPE_MASTER = "Master"
NODE_TYPE_COMPUTE = "Compute"


def _object_meta(name: str, namespace: str) -> Dict[str, str]:
    return {"name": name, "namespace": namespace}


def build_cluster_version(settings: ProvisionerSettings) -> Dict[str, Any]:
    """The shared ClusterVersion object."""
    version = settings.cluster_version
    images = version.images
    return {
        "apiVersion": CLUSTER_OPERATOR_API_VERSION,
        "kind": "ClusterVersion",
        "metadata": _object_meta(version.name, settings.namespace),
        "spec": {
            "deploymentType": version.deployment_type,
            "version": version.version,
            "vmImages": {
                "awsImages": {
                    "regionAMIs": [{"region": version.region, "ami": version.ami}],
                },
            },
            "images": {
                "imageFormat": images.image_format,
                "openshiftAnsibleImage": images.openshift_ansible_image,
                "openshiftAnsibleImagePullPolicy": images.pull_policy,
                "clusterAPIImage": images.cluster_api_image,
                "clusterAPIImagePullPolicy": images.pull_policy,
                "machineControllerImage": images.machine_controller_image,
                "machineControllerImagePullPolicy": images.pull_policy,
            },
        },
    }


def build_machine_sets(nodes: ClusterNodes) -> List[Dict[str, Any]]:
    """Master, compute and infra machine sets sized from the node counts."""
    master = {
        "nodeType": NODE_TYPE_MASTER,
        "infra": False,
        "size": nodes.master,
    }
    compute = {
        "shortName": "compute",
        "nodeType": NODE_TYPE_COMPUTE,
        "infra": False,
        "size": nodes.compute,
    }
    infra = {
        "shortName": "infra",
        "nodeType": NODE_TYPE_COMPUTE,
        "infra": True,
        "size": nodes.infra,
    }
    return [master, compute, infra]


def build_cluster_deployment(spec: ClusterSpec, settings: ProvisionerSettings) -> Dict[str, Any]:
    """The ClusterDeployment object of one cluster."""
    name = spec.resource_name
    aws = settings.aws
    return {
        "apiVersion": CLUSTER_OPERATOR_API_VERSION,
        "kind": "ClusterDeployment",
        "metadata": _object_meta(name, settings.namespace),
        "spec": {
            "clusterName": name,
            "clusterVersionRef": _object_meta(settings.cluster_version.name, settings.namespace),
            "networkConfig": {
                "services": {"cidrBlocks": list(settings.network.service_cidr_blocks)},
                "pods": {"cidrBlocks": list(settings.network.pod_cidr_blocks)},
            },
            "hardware": {
                "aws": {
                    "accountSecret": {"name": aws.account_secret},
                    "sshSecret": {"name": aws.ssh_secret},
                    "sshUser": aws.ssh_user,
                    "sslSecret": {"name": aws.ssl_secret},
                    "region": aws.region,
                    "keyPairName": aws.key_pair_name,
                },
            },
            "defaultHardwareSpec": {"aws": {"instanceType": aws.instance_type}},
            "machineSets": build_machine_sets(spec.nodes),
        },
    }
