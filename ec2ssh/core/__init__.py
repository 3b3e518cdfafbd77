"""Core ec2ssh functionality: discovery, recovery, selection and resolution."""

from __future__ import annotations

from ec2ssh.core.aggregator import DiscoveryError, RegionAggregator
from ec2ssh.core.pipeline import ConnectPipeline
from ec2ssh.core.recovery import CredentialRecovery, is_expired_sso_error
from ec2ssh.core.resolver import ResolverPolicy, resolve, resolve_target
from ec2ssh.core.selection import (
    FzfSelector,
    InstanceTemplate,
    SelectionAborted,
    SelectionAdapter,
    SelectionError,
)

__all__ = [
    "ConnectPipeline",
    "CredentialRecovery",
    "DiscoveryError",
    "FzfSelector",
    "InstanceTemplate",
    "RegionAggregator",
    "ResolverPolicy",
    "SelectionAborted",
    "SelectionAdapter",
    "SelectionError",
    "is_expired_sso_error",
    "resolve",
    "resolve_target",
]
