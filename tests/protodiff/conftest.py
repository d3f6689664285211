"""Shared fixtures for protodiff tests. No cluster, registry or network required."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from protodiff.engines.drift_scanner.models import SchemaDescriptor, ServiceMappings, TargetInfo
from protodiff.engines.drift_scanner.scanner import DriftScanner
from protodiff.engines.drift_scanner.store import ResultStore
from protodiff.engines.schema_sources.fixture import FixtureRegistrySource


def make_target(
    name: str = "greeter-7d9f",
    service_name: str = "greeter",
    *,
    namespace: str = "default",
    address: str = "10.0.0.5",
    port: int = 9090,
) -> TargetInfo:
    return TargetInfo(
        name=name,
        namespace=namespace,
        service_name=service_name,
        address=address,
        port=port,
    )


class FakeCluster:
    """In-memory discovery + mapping loader that records how it was called."""

    def __init__(
        self,
        targets: list[TargetInfo] | None = None,
        mappings: dict[str, str] | None = None,
        *,
        mapping_error: Exception | None = None,
        discovery_error: Exception | None = None,
    ) -> None:
        self.targets = list(targets or [])
        self.mappings = dict(mappings or {})
        self.mapping_error = mapping_error
        self.discovery_error = discovery_error
        self.calls: list[tuple] = []

    async def load_mappings(self, namespace: str, name: str) -> ServiceMappings:
        self.calls.append(("load_mappings", namespace, name))
        if self.mapping_error is not None:
            raise self.mapping_error
        return ServiceMappings(self.mappings)

    async def discover_for_services(self, service_names: list[str]) -> list[TargetInfo]:
        self.calls.append(("discover_for_services", sorted(service_names)))
        if self.discovery_error is not None:
            raise self.discovery_error
        wanted = set(service_names)
        return [t for t in self.targets if t.service_name in wanted]

    async def discover_all(self) -> list[TargetInfo]:
        self.calls.append(("discover_all",))
        if self.discovery_error is not None:
            raise self.discovery_error
        return list(self.targets)


def live_source_for(schemas: dict[str, SchemaDescriptor]) -> AsyncMock:
    """Live source keyed by ``address:port``; unknown endpoints refuse connection."""

    async def _fetch(ref: str) -> SchemaDescriptor:
        if ref not in schemas:
            raise ConnectionRefusedError(f"connection refused: {ref}")
        return schemas[ref]

    source = AsyncMock()
    source.fetch_schema.side_effect = _fetch
    return source


@pytest.fixture
def store() -> ResultStore:
    return ResultStore()


@pytest.fixture
def make_scanner(store):
    """Factory for a DriftScanner wired to fakes."""

    def _make(
        cluster: FakeCluster,
        live_source,
        registry_source=None,
        *,
        template: str = "",
    ) -> DriftScanner:
        return DriftScanner(
            discovery=cluster,
            mapping_loader=cluster,
            live_source=live_source,
            registry_source=registry_source or FixtureRegistrySource(),
            store=store,
            configmap_namespace="protodiff-system",
            configmap_name="protodiff-mapping",
            module_template=template,
        )

    return _make
