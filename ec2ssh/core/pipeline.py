"""Discover, select, resolve and dispatch: one connect run."""

from __future__ import annotations

import logging
from typing import Protocol

from ec2ssh.constants import MAX_DISCOVERY_ATTEMPTS, ExitStatus
from ec2ssh.core.aggregator import DiscoveryError, RegionAggregator
from ec2ssh.core.resolver import ResolverPolicy, resolve
from ec2ssh.core.selection import SelectionAborted, SelectionAdapter
from ec2ssh.models import ConnectionPlan, InstanceRecord, RegionQuery
from ec2ssh.services.session import SessionDispatcher

logger = logging.getLogger(__name__)


class Recovery(Protocol):
    def try_recover(self, error: BaseException) -> bool: ...


def _display(value: str | None) -> str:
    return value if value else "<none>"


class ConnectPipeline:
    """Sequence one discovery and connect cycle.

    Parameters
    ----------
    aggregator : RegionAggregator
        Multi-region discovery
    recovery : Recovery
        Credential recovery consulted when discovery fails
    selection : SelectionAdapter
        Interactive selection
    policy : ResolverPolicy
        Addressing policy for resolution
    dispatcher : SessionDispatcher
        Session launcher
    print_only : bool
        Print session commands instead of running them
    """

    def __init__(
        self,
        aggregator: RegionAggregator,
        recovery: Recovery,
        selection: SelectionAdapter,
        policy: ResolverPolicy,
        dispatcher: SessionDispatcher,
        print_only: bool = False,
    ) -> None:
        self.aggregator = aggregator
        self.recovery = recovery
        self.selection = selection
        self.policy = policy
        self.dispatcher = dispatcher
        self.print_only = print_only

    def discover(self, queries: list[RegionQuery]) -> list[InstanceRecord]:
        """Fetch instances, retrying once after a successful credential recovery.

        Raises
        ------
        DiscoveryError
            If discovery fails and recovery does not apply or fails, or if the
            retry fails as well
        """
        for _ in range(MAX_DISCOVERY_ATTEMPTS - 1):
            try:
                return self.aggregator.fetch_all(queries)
            except DiscoveryError as e:
                if not self.recovery.try_recover(e):
                    raise
                logger.debug("Retrying discovery after credential recovery")

        return self.aggregator.fetch_all(queries)

    def resolve_plans(self, records: list[InstanceRecord]) -> list[ConnectionPlan]:
        """Resolve selected instances, reporting and skipping unresolvable ones."""
        plans: list[ConnectionPlan] = []

        for record in records:
            plan = resolve(record, self.policy)
            if plan is None:
                logger.warning(
                    "No connection details available for selected instance %s "
                    "(public DNS: %s, public IP: %s, private IP: %s)",
                    record.instance_id,
                    _display(record.public_dns),
                    _display(record.public_ip),
                    _display(record.private_ip),
                )
                continue
            plans.append(plan)

        return plans

    def run(self, queries: list[RegionQuery]) -> int:
        """Run the pipeline and return the process exit status.

        Parameters
        ----------
        queries : list[RegionQuery]
            Validated region queries

        Returns
        -------
        int
            Exit status: success, failure, or aborted

        Raises
        ------
        DiscoveryError
            If discovery fails fatally
        SelectionError
            If the selection tool fails
        DispatchError
            If a session process cannot be started
        """
        records = self.discover(queries)

        if not records:
            logger.error("No instances found in %s", ", ".join(q.region for q in queries))
            return ExitStatus.FAILURE

        try:
            indexes = self.selection.select(records)
        except SelectionAborted:
            return ExitStatus.ABORTED

        plans = self.resolve_plans([records[index] for index in indexes])
        return self.dispatcher.dispatch(plans, print_only=self.print_only)
