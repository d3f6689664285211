"""Drift scanner engine — compare live gRPC contracts against the registry."""

from protodiff.engines.drift_scanner.comparator import compare, render_diff, summarize_match
from protodiff.engines.drift_scanner.models import (
    DiffStatus,
    MethodMismatch,
    SchemaDescriptor,
    SchemaDiff,
    ScanResult,
    ServiceDescriptor,
    ServiceMappings,
    TargetInfo,
)
from protodiff.engines.drift_scanner.resolver import resolve_module
from protodiff.engines.drift_scanner.scanner import DriftScanner, validate_target
from protodiff.engines.drift_scanner.sources import MappingLoader, SchemaSource, TargetDiscovery
from protodiff.engines.drift_scanner.store import ResultStore

__all__ = [
    "DiffStatus",
    "DriftScanner",
    "MappingLoader",
    "MethodMismatch",
    "ResultStore",
    "ScanResult",
    "SchemaDescriptor",
    "SchemaDiff",
    "SchemaSource",
    "ServiceDescriptor",
    "ServiceMappings",
    "TargetDiscovery",
    "TargetInfo",
    "compare",
    "render_diff",
    "resolve_module",
    "summarize_match",
    "validate_target",
]
