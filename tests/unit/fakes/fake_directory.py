"""In-memory stand-in for InstanceDirectory."""

from __future__ import annotations

import threading
import time

from ec2ssh.models import InstanceRecord, RegionQuery
from ec2ssh.providers.exceptions import ProviderError

Result = list[InstanceRecord] | ProviderError


class FakeDirectory:
    """Directory client with scripted per-region results.

    Parameters
    ----------
    results : dict[str, Result | list[Result]]
        Per-region result. A list of results whose first element is a list
        or error is consumed one per call, the last one repeating
    delays : dict[str, float] | None
        Per-region sleep before answering, in seconds
    barrier : threading.Barrier | None
        When set, every fetch waits on it before answering
    """

    def __init__(
        self,
        results: dict[str, Result | list[Result]],
        delays: dict[str, float] | None = None,
        barrier: threading.Barrier | None = None,
    ) -> None:
        self.results = results
        self.delays = delays or {}
        self.barrier = barrier
        self.calls: list[RegionQuery] = []
        self._lock = threading.Lock()
        self._call_counts: dict[str, int] = {}

    def _next_result(self, region: str) -> Result:
        scripted = self.results.get(region, [])

        if isinstance(scripted, ProviderError):
            return scripted

        if scripted and isinstance(scripted[0], (list, ProviderError)):
            with self._lock:
                count = self._call_counts.get(region, 0)
                self._call_counts[region] = count + 1
            return scripted[min(count, len(scripted) - 1)]

        return scripted

    def fetch(self, query: RegionQuery) -> list[InstanceRecord]:
        with self._lock:
            self.calls.append(query)

        if self.barrier is not None:
            self.barrier.wait(timeout=5)

        delay = self.delays.get(query.region, 0)
        if delay:
            time.sleep(delay)

        result = self._next_result(query.region)
        if isinstance(result, ProviderError):
            raise result
        return list(result)

    @property
    def regions_called(self) -> list[str]:
        with self._lock:
            return [query.region for query in self.calls]
