"""ResultService — listing, lookup and aggregate counts for scan results."""

from __future__ import annotations

from dataclasses import dataclass

from protodiff.engines.drift_scanner.models import DiffStatus, ScanResult
from protodiff.engines.drift_scanner.store import ResultStore
from protodiff.services import NotFoundError


@dataclass(frozen=True)
class ResultStats:
    total: int = 0
    sync: int = 0
    mismatch: int = 0
    unknown: int = 0


class ResultService:
    def __init__(self, store: ResultStore) -> None:
        self._store = store

    def list(self, status: DiffStatus | None = None) -> list[ScanResult]:
        """All results ordered by namespace then name, optionally filtered by status."""
        results = self._store.get_all()
        if status is not None:
            results = [r for r in results if r.status == status]
        return sorted(results, key=lambda r: (r.namespace, r.name))

    def get(self, namespace: str, name: str) -> ScanResult:
        result = self._store.get(namespace, name)
        if result is None:
            raise NotFoundError(f"no scan result for {namespace}/{name}")
        return result

    def count(self) -> int:
        return self._store.count()

    @staticmethod
    def stats(results: list[ScanResult]) -> ResultStats:
        counts = {status: 0 for status in DiffStatus}
        for result in results:
            counts[result.status] += 1
        return ResultStats(
            total=len(results),
            sync=counts[DiffStatus.SYNC],
            mismatch=counts[DiffStatus.MISMATCH],
            unknown=counts[DiffStatus.UNKNOWN],
        )
