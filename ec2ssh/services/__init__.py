"""Session services: ssh and SSM process dispatch."""

from __future__ import annotations

from ec2ssh.services.session import (
    DispatchError,
    SessionDispatcher,
    build_ssh_command,
    build_ssm_command,
)

__all__ = [
    "DispatchError",
    "SessionDispatcher",
    "build_ssh_command",
    "build_ssm_command",
]
