"""Kubernetes adapter — pod discovery and the service-to-module ConfigMap.

The official client is synchronous; every API call runs in a worker thread so
the scan loop and the dashboard share one event loop without blocking.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException

from protodiff.core.errors import DiscoveryError, MappingLoadError
from protodiff.engines.drift_scanner.models import ServiceMappings, TargetInfo

log = structlog.get_logger("protodiff.engine")

GRPC_SERVICE_LABEL = "grpc-service"
SERVICE_NAME_LABEL = "app"
DEFAULT_GRPC_PORT = 9090


def grpc_port(pod: Any) -> int:
    """Best-effort reflection port for *pod*.

    A container port named ``grpc`` wins; otherwise the first TCP port;
    otherwise :data:`DEFAULT_GRPC_PORT`.
    """
    first_tcp: int | None = None
    for container in pod.spec.containers or []:
        for port in container.ports or []:
            if port.name == "grpc":
                return port.container_port
            if first_tcp is None and (port.protocol or "TCP") == "TCP":
                first_tcp = port.container_port
    return first_tcp if first_tcp is not None else DEFAULT_GRPC_PORT


def pod_to_target(pod: Any, service_name: str) -> TargetInfo:
    return TargetInfo(
        name=pod.metadata.name,
        namespace=pod.metadata.namespace,
        service_name=service_name,
        address=pod.status.pod_ip or "",
        port=grpc_port(pod),
    )


def _is_running(pod: Any) -> bool:
    return pod.status is not None and pod.status.phase == "Running"


class KubeClient:
    """Implements both target discovery and mapping loading."""

    def __init__(self, kubeconfig: str | None = None, core_api: Any | None = None) -> None:
        if core_api is None:
            if kubeconfig:
                config.load_kube_config(config_file=kubeconfig)
            else:
                try:
                    config.load_incluster_config()
                except config.ConfigException:
                    config.load_kube_config()
            core_api = client.CoreV1Api()
        self._core = core_api

    async def discover_all(self) -> list[TargetInfo]:
        """Running pods labelled ``grpc-service=true`` in every namespace."""
        pods = await self._list_pods(f"{GRPC_SERVICE_LABEL}=true")
        targets = []
        for pod in pods:
            if not _is_running(pod):
                continue
            labels = pod.metadata.labels or {}
            targets.append(pod_to_target(pod, labels.get(SERVICE_NAME_LABEL) or "unknown"))
        return targets

    async def discover_for_services(self, service_names: list[str]) -> list[TargetInfo]:
        """Running pods whose ``app`` label is one of *service_names*."""
        targets = []
        for service_name in service_names:
            pods = await self._list_pods(f"{SERVICE_NAME_LABEL}={service_name}")
            targets.extend(pod_to_target(pod, service_name) for pod in pods if _is_running(pod))
        return targets

    async def load_mappings(self, namespace: str, name: str) -> ServiceMappings:
        try:
            cm = await asyncio.to_thread(self._core.read_namespaced_config_map, name, namespace)
        except ApiException as exc:
            raise MappingLoadError(
                f"failed to get configmap {namespace}/{name}: {exc.status} {exc.reason}"
            ) from exc
        return ServiceMappings(cm.data or {})

    async def _list_pods(self, selector: str) -> list[Any]:
        try:
            pod_list = await asyncio.to_thread(
                self._core.list_pod_for_all_namespaces, label_selector=selector
            )
        except ApiException as exc:
            raise DiscoveryError(
                f"failed to list pods ({selector}): {exc.status} {exc.reason}"
            ) from exc
        log.debug("kube.pods_listed", selector=selector, count=len(pod_list.items))
        return list(pod_list.items)
