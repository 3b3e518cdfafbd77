"""Per-instance choice of transport and target address."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ec2ssh.models import ConnectionPlan, InstanceRecord, TransportKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolverPolicy:
    """Addressing policy applied to every selected instance.

    Parameters
    ----------
    use_private_ip : bool
        Connect to private addresses instead of public DNS/IP
    ssm_tag_key : str
        Tag key marking instances reached through SSM. Empty disables SSM
    ssm_tag_value : str
        Required tag value. Empty means any value matches
    """

    use_private_ip: bool = True
    ssm_tag_key: str = ""
    ssm_tag_value: str = ""


def uses_agent_session(record: InstanceRecord, policy: ResolverPolicy) -> bool:
    """Return True if the instance carries the configured SSM tag."""
    if not policy.ssm_tag_key:
        return False

    value = record.tag(policy.ssm_tag_key)
    if value is None:
        return False

    return not policy.ssm_tag_value or value == policy.ssm_tag_value


def resolve_target(record: InstanceRecord, policy: ResolverPolicy) -> str:
    """Return the connection target for an instance.

    Rules, first match wins:

    1. SSM-tagged instance: the instance id.
    2. Private addressing: the private IP, never a public address.
    3. Public addressing: public DNS, then public IP, never the private IP.

    Parameters
    ----------
    record : InstanceRecord
        Instance to resolve
    policy : ResolverPolicy
        Addressing policy

    Returns
    -------
    str
        Target string, or an empty string when the instance has no usable
        address under the policy
    """
    if uses_agent_session(record, policy):
        return record.instance_id

    if policy.use_private_ip:
        return record.private_ip or ""

    return record.public_dns or record.public_ip or ""


def resolve(record: InstanceRecord, policy: ResolverPolicy) -> ConnectionPlan | None:
    """Build the ConnectionPlan for an instance, or None if unresolvable."""
    target = resolve_target(record, policy)
    if not target:
        return None

    kind = (
        TransportKind.AGENT_SESSION
        if uses_agent_session(record, policy)
        else TransportKind.DIRECT_SHELL
    )
    return ConnectionPlan(kind=kind, target=target, instance_id=record.instance_id)
