"""AWS-specific utility functions for ec2ssh."""

from __future__ import annotations

from typing import Any

from ec2ssh.models import InstanceRecord


def tags_to_pairs(raw_tags: list[dict[str, Any]] | None) -> tuple[tuple[str, str], ...]:
    """Flatten DescribeInstances tags into ordered key/value pairs.

    Later duplicates of a key are dropped so keys stay unique.

    Parameters
    ----------
    raw_tags : list[dict[str, Any]] | None
        ``Tags`` list from a DescribeInstances instance entry

    Returns
    -------
    tuple[tuple[str, str], ...]
        Tag pairs in provider order
    """
    pairs: list[tuple[str, str]] = []
    seen: set[str] = set()

    for tag in raw_tags or []:
        key = tag.get("Key")
        if key is None or key in seen:
            continue
        seen.add(key)
        pairs.append((key, tag.get("Value") or ""))

    return tuple(pairs)


def instance_to_record(instance: dict[str, Any], region: str) -> InstanceRecord:
    """Build an InstanceRecord from a DescribeInstances instance entry."""
    return InstanceRecord(
        instance_id=instance["InstanceId"],
        state=instance.get("State", {}).get("Name", "unknown"),
        region=region,
        instance_type=instance.get("InstanceType"),
        private_ip=instance.get("PrivateIpAddress") or None,
        public_ip=instance.get("PublicIpAddress") or None,
        public_dns=instance.get("PublicDnsName") or None,
        tags=tags_to_pairs(instance.get("Tags")),
    )


def get_aws_credentials_error_message(profile: str | None = None) -> str:
    """Get standard AWS credentials error message.

    Parameters
    ----------
    profile : str | None
        Active profile, used to tailor the ``aws sso login`` hint

    Returns
    -------
    str
        Formatted AWS credentials error message
    """
    sso_hint = f"  aws sso login --profile {profile}\n" if profile else "  aws sso login\n"
    return (
        "Cloud credentials not found or expired\n\n"
        "Refresh single sign-on credentials:\n"
        f"{sso_hint}\n"
        "Or configure static credentials:\n"
        "  aws configure"
    )
