"""Concurrent multi-region instance discovery."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Protocol

from ec2ssh.models import FetchOutcome, InstanceRecord, RegionQuery
from ec2ssh.providers.exceptions import ProviderError

logger = logging.getLogger(__name__)


class DirectoryClient(Protocol):
    """Anything that can fetch one region's instances."""

    def fetch(self, query: RegionQuery) -> list[InstanceRecord]: ...


class DiscoveryError(RuntimeError):
    """A region's inventory fetch failed.

    Parameters
    ----------
    region : str
        Region whose fetch failed
    error : ProviderError
        Underlying provider error, also chained as ``__cause__``
    """

    def __init__(self, region: str, error: ProviderError) -> None:
        super().__init__(f"Failed to list instances in {region}: {error}")
        self.region = region
        self.error = error


class RegionAggregator:
    """Fan out directory fetches over regions and merge the results.

    Each region runs in its own worker thread and hands back a FetchOutcome
    through its future; nothing is shared between workers.

    Parameters
    ----------
    directory : DirectoryClient
        Client used for each regional fetch
    """

    def __init__(self, directory: DirectoryClient) -> None:
        self.directory = directory

    def _fetch_one(self, query: RegionQuery) -> FetchOutcome:
        try:
            instances = self.directory.fetch(query)
        except ProviderError as e:
            logger.debug("Fetch failed in %s: %s", query.region, e)
            return FetchOutcome(region=query.region, error=e)
        return FetchOutcome(region=query.region, instances=tuple(instances))

    def collect(self, queries: list[RegionQuery]) -> list[FetchOutcome]:
        """Run every query concurrently and return outcomes in completion order.

        Blocks until all workers have finished.
        """
        if not queries:
            return []

        outcomes: list[FetchOutcome] = []

        with ThreadPoolExecutor(max_workers=len(queries)) as executor:
            futures = [executor.submit(self._fetch_one, query) for query in queries]
            for future in as_completed(futures):
                outcomes.append(future.result())

        return outcomes

    def fetch_all(self, queries: list[RegionQuery]) -> list[InstanceRecord]:
        """Fetch instances from all regions.

        Merge order across regions is unspecified; each region keeps its
        provider order. If any region fails, instances from the other regions
        are discarded and the first failure observed is raised.

        Parameters
        ----------
        queries : list[RegionQuery]
            One query per region

        Returns
        -------
        list[InstanceRecord]
            Union of all regions' instances

        Raises
        ------
        DiscoveryError
            If at least one region failed
        """
        outcomes = self.collect(queries)

        first_failure = next((outcome for outcome in outcomes if not outcome.ok), None)
        if first_failure is not None:
            failed = [outcome.region for outcome in outcomes if not outcome.ok]
            if len(failed) > 1:
                logger.debug("Multiple regions failed: %s", ", ".join(failed))
            raise DiscoveryError(first_failure.region, first_failure.error) from first_failure.error

        return [record for outcome in outcomes for record in outcome.instances]
