"""Logging helpers for ec2ssh."""

from ec2ssh.logging.filters import StreamRoutingFilter
from ec2ssh.logging.formatters import StreamFormatter

__all__ = ["StreamFormatter", "StreamRoutingFilter"]
