"""Collaborator interfaces the scanner depends on."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from protodiff.engines.drift_scanner.models import SchemaDescriptor, ServiceMappings, TargetInfo


@runtime_checkable
class SchemaSource(Protocol):
    """Anything that turns a reference into a :class:`SchemaDescriptor`.

    Live sources take ``host:port``; registry sources take a module reference
    such as ``buf.build/acme/user``. Failures are raised, not returned.
    """

    async def fetch_schema(self, ref: str) -> SchemaDescriptor: ...


@runtime_checkable
class TargetDiscovery(Protocol):
    """Lists running targets; non-running instances are never returned."""

    async def discover_for_services(self, service_names: list[str]) -> list[TargetInfo]: ...

    async def discover_all(self) -> list[TargetInfo]: ...


@runtime_checkable
class MappingLoader(Protocol):
    async def load_mappings(self, namespace: str, name: str) -> ServiceMappings: ...
