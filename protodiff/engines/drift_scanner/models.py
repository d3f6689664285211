"""Data models for the drift scanner engine."""

from __future__ import annotations

import enum
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime


class DiffStatus(str, enum.Enum):
    """Outcome of validating one target."""

    SYNC = "SYNC"
    MISMATCH = "MISMATCH"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class TargetInfo:
    """A running service instance returned by discovery.

    Scoped to one scan cycle; never stored.
    """

    name: str
    namespace: str
    service_name: str
    address: str
    port: int

    @property
    def endpoint(self) -> str:
        """``address:port`` as dialled by the reflection client."""
        if ":" in self.address and not self.address.startswith("["):
            return f"[{self.address}]:{self.port}"
        return f"{self.address}:{self.port}"


class ServiceMappings:
    """Read-only table of logical service name -> registry module.

    A missing key is an ordinary state: the service is either resolved through
    the module template or left unvalidated for the cycle.
    """

    __slots__ = ("_mappings",)

    def __init__(self, data: Mapping[str, str] | None = None) -> None:
        self._mappings: dict[str, str] = dict(data or {})

    def get(self, service_name: str) -> str | None:
        return self._mappings.get(service_name)

    def has(self, service_name: str) -> bool:
        return service_name in self._mappings

    def service_names(self) -> list[str]:
        return list(self._mappings)

    def count(self) -> int:
        return len(self._mappings)

    def items(self) -> list[tuple[str, str]]:
        return list(self._mappings.items())

    def __len__(self) -> int:
        return len(self._mappings)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._mappings))

    def __contains__(self, service_name: object) -> bool:
        return service_name in self._mappings

    def __repr__(self) -> str:
        return f"ServiceMappings({self._mappings!r})"


@dataclass(frozen=True)
class ServiceDescriptor:
    name: str  # fully qualified, e.g. "user.v1.UserService"
    methods: tuple[str, ...] = ()


@dataclass(frozen=True)
class SchemaDescriptor:
    """Snapshot of a wire contract: services with their methods, and message types."""

    services: tuple[ServiceDescriptor, ...] = ()
    messages: tuple[str, ...] = ()

    @classmethod
    def build(
        cls,
        services: Mapping[str, list[str] | tuple[str, ...]],
        messages: list[str] | tuple[str, ...] = (),
    ) -> SchemaDescriptor:
        """Convenience constructor from ``{service: [method, ...]}``."""
        return cls(
            services=tuple(
                ServiceDescriptor(name=name, methods=tuple(methods))
                for name, methods in services.items()
            ),
            messages=tuple(messages),
        )

    def service_names(self) -> list[str]:
        return [svc.name for svc in self.services]

    def to_dict(self) -> dict:
        return {
            "services": [{"name": s.name, "methods": list(s.methods)} for s in self.services],
            "messages": list(self.messages),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> SchemaDescriptor:
        return cls(
            services=tuple(
                ServiceDescriptor(name=s["name"], methods=tuple(s.get("methods") or ()))
                for s in data.get("services") or ()
            ),
            messages=tuple(data.get("messages") or ()),
        )


@dataclass(frozen=True)
class MethodMismatch:
    """A service present on both sides whose method sets differ."""

    service: str
    live_method_count: int
    registry_method_count: int
    missing_methods: tuple[str, ...] = ()  # in registry, not live
    extra_methods: tuple[str, ...] = ()  # live, not in registry


@dataclass(frozen=True)
class SchemaDiff:
    """Structured explanation of a comparison. Built only by ``compare()``."""

    live_services: tuple[str, ...] = ()
    registry_services: tuple[str, ...] = ()
    missing_in_live: tuple[str, ...] = ()
    extra_in_live: tuple[str, ...] = ()
    method_mismatches: tuple[MethodMismatch, ...] = ()

    @property
    def common_services(self) -> tuple[str, ...]:
        registry = set(self.registry_services)
        return tuple(name for name in self.live_services if name in registry)


@dataclass(frozen=True)
class ScanResult:
    """Latest validation outcome for one target.

    Status stays ``UNKNOWN`` unless both fetches and the comparison succeeded.
    """

    name: str
    namespace: str
    service_name: str
    address: str
    port: int
    last_checked: datetime
    registry_module: str | None = None
    status: DiffStatus = DiffStatus.UNKNOWN
    message: str = ""
    diff: SchemaDiff | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.namespace, self.name)
