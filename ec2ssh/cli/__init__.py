"""CLI argument parsing and handling."""

from __future__ import annotations

from ec2ssh.cli.parsing import (
    build_cli_overrides,
    parse_bool_parameter,
    parse_list_parameter,
)

__all__ = [
    "build_cli_overrides",
    "parse_bool_parameter",
    "parse_list_parameter",
]
