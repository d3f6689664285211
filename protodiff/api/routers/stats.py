"""Stats router — dashboard aggregates."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from protodiff.api.deps import get_result_service
from protodiff.api.schemas.result import StatsResponse
from protodiff.services.result_service import ResultService

router = APIRouter()


@router.get("/", response_model=StatsResponse)
async def get_stats(svc: ResultService = Depends(get_result_service)) -> StatsResponse:
    return StatsResponse(**asdict(svc.stats(svc.list())))
