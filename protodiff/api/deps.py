"""Dependency injection — the shared result store and service singletons."""

from __future__ import annotations

from protodiff.core.config import Settings
from protodiff.engines.discovery.kube import KubeClient
from protodiff.engines.drift_scanner.scanner import DriftScanner
from protodiff.engines.drift_scanner.store import ResultStore
from protodiff.engines.schema_sources import ReflectionClient, create_registry_source
from protodiff.services.result_service import ResultService

# The store is the only state shared between the scan loop and request handlers.
_store = ResultStore()
_result_service = ResultService(_store)


def set_store(store: ResultStore) -> None:
    """Override the shared store (for testing and embedding)."""
    global _store, _result_service  # noqa: PLW0603
    _store = store
    _result_service = ResultService(store)


def get_store() -> ResultStore:
    return _store


def get_result_service() -> ResultService:
    return _result_service


def build_scanner(settings: Settings, store: ResultStore | None = None) -> DriftScanner:
    """Wire the production collaborators into a DriftScanner."""
    kube = KubeClient(kubeconfig=settings.kubeconfig)
    return DriftScanner(
        discovery=kube,
        mapping_loader=kube,
        live_source=ReflectionClient(timeout=settings.rpc_timeout),
        registry_source=create_registry_source(settings),
        store=store if store is not None else _store,
        configmap_namespace=settings.configmap_namespace,
        configmap_name=settings.configmap_name,
        module_template=settings.bsr_template,
    )
