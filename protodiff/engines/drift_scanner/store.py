"""ResultStore — latest ScanResult per target, shared by scanner and dashboard."""

from __future__ import annotations

import threading

from protodiff.engines.drift_scanner.models import ScanResult


class ResultStore:
    """Lock-guarded in-memory table keyed by ``(namespace, name)``.

    One writer (the scan cycle) and any number of readers (API requests, which
    may run on the event loop or in the threadpool). ``ScanResult`` is frozen
    and replaced whole, so a reader sees either the previous or the new value
    for a key. There is no cross-key atomicity: while a cycle runs, some
    targets may already be refreshed and others not.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._results: dict[tuple[str, str], ScanResult] = {}

    def set(self, result: ScanResult) -> None:
        """Insert or fully replace the result for ``result.key``."""
        with self._lock:
            self._results[result.key] = result

    def get(self, namespace: str, name: str) -> ScanResult | None:
        with self._lock:
            return self._results.get((namespace, name))

    def get_all(self) -> list[ScanResult]:
        """Snapshot of all stored results, in no particular order."""
        with self._lock:
            return list(self._results.values())

    def delete(self, namespace: str, name: str) -> None:
        with self._lock:
            self._results.pop((namespace, name), None)

    def count(self) -> int:
        with self._lock:
            return len(self._results)
