"""HTML rendering for the drift dashboard."""

from __future__ import annotations

import html
from datetime import datetime

from protodiff.engines.drift_scanner.models import DiffStatus, ScanResult
from protodiff.services.result_service import ResultStats

_STATUS_COLORS: dict[DiffStatus, str] = {
    DiffStatus.SYNC: "#388e3c",
    DiffStatus.MISMATCH: "#d32f2f",
    DiffStatus.UNKNOWN: "#fbc02d",
}


def _esc(value: object) -> str:
    return html.escape("" if value is None else str(value))


def _render_row(index: int, result: ScanResult) -> str:
    color = _STATUS_COLORS.get(result.status, "#757575")
    light = (
        f'<span style="display: inline-block; width: 12px; height: 12px;'
        f' border-radius: 50%; background: {color};"></span>'
    )
    return (
        "<tr>"
        f"<td>{index}</td>"
        f"<td>{light} {_esc(result.status.value)}</td>"
        f"<td>{_esc(result.namespace)}/{_esc(result.name)}</td>"
        f"<td>{_esc(result.service_name)}</td>"
        f"<td><code>{_esc(result.registry_module or '-')}</code></td>"
        f"<td>{_esc(result.address)}:{result.port}</td>"
        f"<td>{_esc(result.message)}</td>"
        f"<td>{result.last_checked.strftime('%Y-%m-%d %H:%M:%S')}</td>"
        "</tr>"
    )


def render_dashboard(results: list[ScanResult], stats: ResultStats, now: datetime) -> str:
    """Return the full dashboard page: summary counters and one row per target."""
    rows = "\n".join(_render_row(i, r) for i, r in enumerate(results, start=1))
    if not rows:
        rows = '<tr><td colspan="8">No scan results yet.</td></tr>'

    card = 'style="display: inline-block; padding: 8px 16px; margin-right: 8px; border-radius: 4px;'
    body_style = (
        "font-family: -apple-system, BlinkMacSystemFont,"
        " 'Segoe UI', Roboto, sans-serif; color: #212121; margin: 24px;"
    )

    return f"""\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<meta http-equiv="refresh" content="30">
<title>ProtoDiff — gRPC Schema Drift</title>
<style>
  table {{ border-collapse: collapse; width: 100%; }}
  th, td {{ padding: 6px 12px; border-bottom: 1px solid #e0e0e0; text-align: left; }}
  th {{ background: #fafafa; }}
</style>
</head>
<body style="{body_style}">
<h2>ProtoDiff — gRPC Schema Drift</h2>
<div style="margin-bottom: 16px;">
  <span {card} background: #eeeeee;">Total: {stats.total}</span>
  <span {card} background: #e8f5e9;">Sync: {stats.sync}</span>
  <span {card} background: #ffebee;">Mismatch: {stats.mismatch}</span>
  <span {card} background: #fffde7;">Unknown: {stats.unknown}</span>
</div>
<table>
  <tr><th>#</th><th>Status</th><th>Target</th><th>Service</th><th>Registry module</th>
      <th>Address</th><th>Message</th><th>Last checked</th></tr>
{rows}
</table>
<p style="color: #757575;">Last update: {now.strftime('%Y-%m-%d %H:%M:%S')}</p>
</body>
</html>
"""
