"""Scan result response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from protodiff.engines.drift_scanner.models import DiffStatus, ScanResult, SchemaDiff


class MethodMismatchItem(BaseModel):
    service: str
    live_method_count: int
    registry_method_count: int
    missing_methods: list[str]
    extra_methods: list[str]


class SchemaDiffDetail(BaseModel):
    live_services: list[str]
    registry_services: list[str]
    missing_in_live: list[str]
    extra_in_live: list[str]
    method_mismatches: list[MethodMismatchItem]

    @classmethod
    def from_diff(cls, diff: SchemaDiff) -> SchemaDiffDetail:
        return cls(
            live_services=list(diff.live_services),
            registry_services=list(diff.registry_services),
            missing_in_live=list(diff.missing_in_live),
            extra_in_live=list(diff.extra_in_live),
            method_mismatches=[
                MethodMismatchItem(
                    service=mm.service,
                    live_method_count=mm.live_method_count,
                    registry_method_count=mm.registry_method_count,
                    missing_methods=list(mm.missing_methods),
                    extra_methods=list(mm.extra_methods),
                )
                for mm in diff.method_mismatches
            ],
        )


class ScanResultItem(BaseModel):
    name: str
    namespace: str
    service_name: str
    registry_module: str | None
    status: DiffStatus
    message: str
    last_checked: datetime
    address: str
    port: int
    diff: SchemaDiffDetail | None = None

    @classmethod
    def from_result(cls, result: ScanResult) -> ScanResultItem:
        return cls(
            name=result.name,
            namespace=result.namespace,
            service_name=result.service_name,
            registry_module=result.registry_module,
            status=result.status,
            message=result.message,
            last_checked=result.last_checked,
            address=result.address,
            port=result.port,
            diff=SchemaDiffDetail.from_diff(result.diff) if result.diff is not None else None,
        )


class StatsResponse(BaseModel):
    total: int
    sync: int
    mismatch: int
    unknown: int


class HealthResponse(BaseModel):
    status: str
    results: int
