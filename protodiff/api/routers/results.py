"""Scan results router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from protodiff.api.deps import get_result_service
from protodiff.api.schemas.result import ScanResultItem
from protodiff.engines.drift_scanner.models import DiffStatus
from protodiff.services.result_service import ResultService

router = APIRouter()


@router.get("/", response_model=list[ScanResultItem])
async def list_results(
    status: DiffStatus | None = Query(None),
    svc: ResultService = Depends(get_result_service),
) -> list[ScanResultItem]:
    return [ScanResultItem.from_result(r) for r in svc.list(status=status)]


@router.get("/{namespace}/{name}", response_model=ScanResultItem)
async def get_result(
    namespace: str,
    name: str,
    svc: ResultService = Depends(get_result_service),
) -> ScanResultItem:
    return ScanResultItem.from_result(svc.get(namespace, name))
