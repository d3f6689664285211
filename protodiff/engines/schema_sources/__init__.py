"""Schema sources — live reflection and interchangeable registry backends."""

from __future__ import annotations

from protodiff.core.config import Settings
from protodiff.engines.drift_scanner.sources import SchemaSource
from protodiff.engines.schema_sources.bsr_http import BsrHttpSource
from protodiff.engines.schema_sources.buf_cli import BufCliSource
from protodiff.engines.schema_sources.descriptors import (
    descriptor_set_to_schema,
    file_protos_to_schema,
)
from protodiff.engines.schema_sources.fixture import DEFAULT_FIXTURES, FixtureRegistrySource
from protodiff.engines.schema_sources.reflection import REFLECTION_SERVICES, ReflectionClient


def create_registry_source(settings: Settings) -> SchemaSource:
    """Pick the registry backend named by ``settings.registry_mode``."""
    if settings.registry_mode == "http":
        return BsrHttpSource(
            settings.bsr_token or None,
            base_url=settings.bsr_url,
            timeout=settings.registry_timeout,
        )
    if settings.registry_mode == "fixture":
        return FixtureRegistrySource()
    return BufCliSource(settings.bsr_token or None, timeout=settings.registry_timeout)


__all__ = [
    "DEFAULT_FIXTURES",
    "REFLECTION_SERVICES",
    "BsrHttpSource",
    "BufCliSource",
    "FixtureRegistrySource",
    "ReflectionClient",
    "create_registry_source",
    "descriptor_set_to_schema",
    "file_protos_to_schema",
]
