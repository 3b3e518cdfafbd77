"""AWS provider implementation."""

from __future__ import annotations

from ec2ssh.providers.aws.directory import InstanceDirectory, build_filters

__all__ = ["InstanceDirectory", "build_filters"]
