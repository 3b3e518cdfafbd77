"""Global constants for ec2ssh.

This module contains application-wide constants shared by discovery, session
dispatch and the command-line layer.
"""

from enum import IntEnum

DEFAULT_REGION = "us-east-1"
"""Region queried when neither the config file, the CLI nor the profile name one."""

DISCOVERABLE_INSTANCE_STATES = ("pending", "running", "shutting-down")
"""Lifecycle states always requested from DescribeInstances.

Stopped and terminated instances cannot accept a shell session, so they are
excluded by the baseline filter and never reach the selection UI.
"""

INSTANCE_STATE_FILTER_NAME = "instance-state-name"

MAX_DISCOVERY_ATTEMPTS = 2
"""Initial discovery plus exactly one retry after credential recovery."""

SSM_INTERACTIVE_DOCUMENT = "AWS-StartInteractiveCommand"
"""SSM document used to run the configured startup command in a session."""

DEFAULT_SSM_COMMAND = "bash -l"

SSH_BINARY = "ssh"
AWS_CLI_BINARY = "aws"
MULTI_PANE_BINARY = "xpanes"
FZF_BINARY = "fzf"

FZF_ABORT_EXIT_CODE = 130
"""fzf exit status when the user presses Esc or Ctrl-C."""

FZF_NO_MATCH_EXIT_CODE = 1

MAX_PROFILES_IN_HINT = 5
"""Number of profile names listed in usage hints before summarising the rest."""

CONFIG_ENV_VAR = "EC2SSH_CONFIG"
DEBUG_ENV_VAR = "EC2SSH_DEBUG"
DEFAULT_CONFIG_PATH = "~/.config/ec2-ssh/config.yaml"


class ExitStatus(IntEnum):
    """Process exit statuses returned by the connect pipeline."""

    SUCCESS = 0
    FAILURE = 1
    CONFIG_ERROR = 2
    ABORTED = 130
