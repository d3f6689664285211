"""Discovery engine — Kubernetes pods and mapping ConfigMap."""

from protodiff.engines.discovery.kube import (
    DEFAULT_GRPC_PORT,
    GRPC_SERVICE_LABEL,
    SERVICE_NAME_LABEL,
    KubeClient,
    grpc_port,
    pod_to_target,
)

__all__ = [
    "DEFAULT_GRPC_PORT",
    "GRPC_SERVICE_LABEL",
    "SERVICE_NAME_LABEL",
    "KubeClient",
    "grpc_port",
    "pod_to_target",
]
