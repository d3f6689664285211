"""DriftScanner — one scan cycle: mappings -> discovery -> per-target validation -> store."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime, timezone

import structlog

from protodiff.engines.drift_scanner.comparator import compare, render_diff, summarize_match
from protodiff.engines.drift_scanner.models import (
    DiffStatus,
    ScanResult,
    ServiceMappings,
    TargetInfo,
)
from protodiff.engines.drift_scanner.resolver import resolve_module
from protodiff.engines.drift_scanner.sources import MappingLoader, SchemaSource, TargetDiscovery
from protodiff.engines.drift_scanner.store import ResultStore

log = structlog.get_logger("protodiff.engine")

MSG_NO_MAPPING = "no registry module mapping found"
MSG_NO_ADDRESS = "address empty, cannot connect"


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


async def validate_target(
    target: TargetInfo,
    mappings: ServiceMappings,
    *,
    live_source: SchemaSource,
    registry_source: SchemaSource,
    template: str | None = None,
) -> ScanResult:
    """Validate one target and return its finalized result.

    Never raises for collaborator failures: every outcome, including fetch
    errors, comes back as a ``ScanResult``. The caller owns the store write.
    """
    result = ScanResult(
        name=target.name,
        namespace=target.namespace,
        service_name=target.service_name,
        address=target.address,
        port=target.port,
        last_checked=datetime.now(timezone.utc),
    )

    module = resolve_module(target.service_name, mappings, template)
    if module is None:
        return replace(result, message=MSG_NO_MAPPING)
    result = replace(result, registry_module=module)

    if not target.address:
        return replace(result, message=MSG_NO_ADDRESS)

    try:
        live = await live_source.fetch_schema(target.endpoint)
    except Exception as exc:
        return replace(result, message=f"failed to fetch live schema: {_describe(exc)}")

    try:
        canonical = await registry_source.fetch_schema(module)
    except Exception as exc:
        return replace(result, message=f"failed to fetch registry schema: {_describe(exc)}")

    is_match, diff = compare(live, canonical)
    if is_match:
        return replace(result, status=DiffStatus.SYNC, message=summarize_match(diff), diff=diff)
    return replace(result, status=DiffStatus.MISMATCH, message=render_diff(diff), diff=diff)


class DriftScanner:
    """Runs scan cycles against the injected collaborators.

    Targets are validated one after another. Holds no state between cycles
    other than the shared :class:`ResultStore`.
    """

    def __init__(
        self,
        *,
        discovery: TargetDiscovery,
        mapping_loader: MappingLoader,
        live_source: SchemaSource,
        registry_source: SchemaSource,
        store: ResultStore,
        configmap_namespace: str,
        configmap_name: str,
        module_template: str = "",
    ) -> None:
        self._discovery = discovery
        self._mapping_loader = mapping_loader
        self._live_source = live_source
        self._registry_source = registry_source
        self._store = store
        self._configmap_namespace = configmap_namespace
        self._configmap_name = configmap_name
        self._module_template = module_template

    @property
    def store(self) -> ResultStore:
        return self._store

    @property
    def registry_source(self) -> SchemaSource:
        return self._registry_source

    async def run_cycle(self, stop: asyncio.Event | None = None) -> int:
        """Run one full cycle and return the number of targets validated.

        Discovery errors propagate so the caller can log them and wait for the
        next tick. If *stop* is set between targets the cycle ends early; the
        target in flight is always finished and stored.
        """
        log.info("scan.cycle_started")
        mappings = await self._load_mappings()
        targets = await self._discover(mappings)
        log.info("scan.targets_discovered", count=len(targets), mappings=len(mappings))

        validated = 0
        for target in targets:
            if stop is not None and stop.is_set():
                log.info("scan.cycle_interrupted", remaining=len(targets) - validated)
                break
            result = await self.validate(target, mappings)
            self._store.set(result)
            validated += 1

        log.info("scan.cycle_completed", validated=validated, results_stored=self._store.count())
        return validated

    async def validate(self, target: TargetInfo, mappings: ServiceMappings) -> ScanResult:
        """Validate one target; an unexpected error becomes an UNKNOWN result."""
        try:
            result = await validate_target(
                target,
                mappings,
                live_source=self._live_source,
                registry_source=self._registry_source,
                template=self._module_template,
            )
        except Exception as exc:
            log.exception(
                "scan.target_failed", namespace=target.namespace, target=target.name
            )
            result = ScanResult(
                name=target.name,
                namespace=target.namespace,
                service_name=target.service_name,
                address=target.address,
                port=target.port,
                last_checked=datetime.now(timezone.utc),
                message=f"validation failed: {_describe(exc)}",
            )
        log.info(
            "scan.target_validated",
            namespace=target.namespace,
            target=target.name,
            status=result.status.value,
            module=result.registry_module,
        )
        return result

    async def _load_mappings(self) -> ServiceMappings:
        try:
            return await self._mapping_loader.load_mappings(
                self._configmap_namespace, self._configmap_name
            )
        except Exception as exc:
            log.warning(
                "scan.mappings_unavailable",
                configmap=f"{self._configmap_namespace}/{self._configmap_name}",
                error=_describe(exc),
            )
            return ServiceMappings()

    async def _discover(self, mappings: ServiceMappings) -> list[TargetInfo]:
        names = mappings.service_names()
        if names:
            return await self._discovery.discover_for_services(names)
        return await self._discovery.discover_all()
