"""Dashboard router — server-rendered HTML overview."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from protodiff.api.deps import get_result_service
from protodiff.api.template import render_dashboard
from protodiff.services.result_service import ResultService

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def dashboard(svc: ResultService = Depends(get_result_service)) -> HTMLResponse:
    results = svc.list()
    page = render_dashboard(results, svc.stats(results), datetime.now(timezone.utc))
    return HTMLResponse(page)
