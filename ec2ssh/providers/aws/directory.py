"""EC2 instance directory client: one region's inventory query."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import boto3

from ec2ssh.constants import DISCOVERABLE_INSTANCE_STATES, INSTANCE_STATE_FILTER_NAME
from ec2ssh.models import InstanceRecord, RegionQuery
from ec2ssh.providers.aws.errors import handle_aws_errors
from ec2ssh.providers.aws.utils import instance_to_record

logger = logging.getLogger(__name__)


def build_filters(query: RegionQuery) -> list[dict[str, Any]]:
    """Build DescribeInstances filters for a query.

    The lifecycle-state filter always comes first; user filters are appended
    after it and can narrow but never replace it.

    Parameters
    ----------
    query : RegionQuery
        Region query carrying parsed user filters

    Returns
    -------
    list[dict[str, Any]]
        Filters in boto3 request format
    """
    filters: list[dict[str, Any]] = [
        {
            "Name": INSTANCE_STATE_FILTER_NAME,
            "Values": list(DISCOVERABLE_INSTANCE_STATES),
        }
    ]
    filters.extend(predicate.to_boto() for predicate in query.filters)
    return filters


class InstanceDirectory:
    """Fetch instances for a single region from EC2.

    Parameters
    ----------
    profile : str | None
        Named AWS profile, or None for the default credential chain
    session_factory : Callable[..., Any] | None
        Optional factory for creating boto3 sessions. If None, uses boto3.Session
    """

    def __init__(
        self,
        profile: str | None = None,
        session_factory: Callable[..., Any] | None = None,
    ) -> None:
        self.profile = profile
        self.session_factory = session_factory or boto3.Session

    def fetch(self, query: RegionQuery) -> list[InstanceRecord]:
        """Return every discoverable instance in the query's region.

        A fresh session is created on every call so that credentials refreshed
        by ``aws sso login`` are picked up on retry.

        Parameters
        ----------
        query : RegionQuery
            Region and user filters

        Returns
        -------
        list[InstanceRecord]
            Instances in provider pagination order

        Raises
        ------
        ProviderCredentialsError
            If credentials are missing or expired
        ProviderAPIError
            If the DescribeInstances call fails
        ProviderConnectionError
            If the regional endpoint is unreachable
        """
        filters = build_filters(query)
        instances: list[InstanceRecord] = []

        with handle_aws_errors():
            session = self.session_factory(
                profile_name=self.profile, region_name=query.region
            )
            ec2_client = session.client("ec2", region_name=query.region)
            paginator = ec2_client.get_paginator("describe_instances")

            for page in paginator.paginate(Filters=filters):
                for reservation in page.get("Reservations", []):
                    for instance in reservation.get("Instances", []):
                        if not instance.get("InstanceId"):
                            logger.debug("Skipping instance without id in %s", query.region)
                            continue
                        instances.append(instance_to_record(instance, query.region))

        logger.debug("Found %d instances in %s", len(instances), query.region)
        return instances
