"""Spawning ssh / SSM sessions for resolved connection plans."""

from __future__ import annotations

import json
import logging
import shlex
import shutil
import subprocess
from collections.abc import Callable
from typing import Any

from ec2ssh.constants import (
    AWS_CLI_BINARY,
    DEFAULT_SSM_COMMAND,
    MULTI_PANE_BINARY,
    SSH_BINARY,
    SSM_INTERACTIVE_DOCUMENT,
    ExitStatus,
)
from ec2ssh.core.signals import interactive_child
from ec2ssh.models import ConnectionPlan

logger = logging.getLogger(__name__)


class DispatchError(RuntimeError):
    """A session process could not be started."""


def build_ssh_command(plan: ConnectionPlan) -> list[str]:
    return [SSH_BINARY, plan.target]


def build_ssm_command(
    plan: ConnectionPlan,
    profile: str | None = None,
    startup_command: str | None = None,
) -> list[str]:
    """Build an ``aws ssm start-session`` argument list.

    Parameters
    ----------
    plan : ConnectionPlan
        Agent-session plan; the target is the instance id
    profile : str | None
        AWS profile passed as ``--profile`` when set
    startup_command : str | None
        Command run through ``AWS-StartInteractiveCommand``. None starts a
        plain session

    Returns
    -------
    list[str]
        Argument list for the AWS CLI
    """
    args = [AWS_CLI_BINARY, "ssm", "start-session", "--target", plan.target]

    if profile:
        args.extend(["--profile", profile])

    if startup_command is not None:
        args.extend(
            [
                "--document-name",
                SSM_INTERACTIVE_DOCUMENT,
                "--parameters",
                f"command={json.dumps([startup_command])}",
            ]
        )

    return args


class SessionDispatcher:
    """Turn connection plans into one or many interactive sessions.

    Parameters
    ----------
    profile : str | None
        AWS profile forwarded to SSM sessions
    ssm_command : str
        Command started in SSM sessions
    runner : Callable[..., Any] | None
        Process runner with the ``subprocess.run`` signature
    which : Callable[[str], str | None] | None
        Executable lookup with the ``shutil.which`` signature
    """

    def __init__(
        self,
        profile: str | None = None,
        ssm_command: str = DEFAULT_SSM_COMMAND,
        runner: Callable[..., Any] | None = None,
        which: Callable[[str], str | None] | None = None,
    ) -> None:
        self.profile = profile
        self.ssm_command = ssm_command
        self.runner = runner or subprocess.run
        self.which = which or shutil.which

    def session_command(self, plan: ConnectionPlan) -> list[str]:
        """Argument list that opens an interactive session for ``plan``."""
        if plan.is_agent_session:
            return build_ssm_command(plan, self.profile, self.ssm_command)
        return build_ssh_command(plan)

    def print_command(self, plan: ConnectionPlan) -> str:
        """Command line shown in print-only mode."""
        if plan.is_agent_session:
            return shlex.join(build_ssm_command(plan, self.profile))
        return shlex.join(build_ssh_command(plan))

    def dispatch(self, plans: list[ConnectionPlan], print_only: bool = False) -> int:
        """Connect to the resolved plans.

        - No plans: report and fail.
        - Print-only: print one command line per plan, spawn nothing.
        - One plan: run the session in the foreground.
        - Several plans: open one xpanes pane per plan, or fall back to the
          first plan when xpanes is not installed.

        Parameters
        ----------
        plans : list[ConnectionPlan]
            Plans in selection order
        print_only : bool
            Print the commands instead of running them

        Returns
        -------
        int
            Process exit status

        Raises
        ------
        DispatchError
            If the session process cannot be started
        """
        if not plans:
            logger.error("No valid connection details found")
            return ExitStatus.FAILURE

        if print_only:
            for plan in plans:
                print(self.print_command(plan))
            return ExitStatus.SUCCESS

        if len(plans) == 1:
            return self.connect(plans[0])

        return self.connect_many(plans)

    def connect(self, plan: ConnectionPlan) -> int:
        """Run a single foreground session for ``plan``."""
        if plan.is_agent_session:
            logger.info("Connecting to %s via SSM...", plan.target)
            label = "SSM"
        else:
            logger.info("Connecting to %s...", plan.target)
            label = "SSH"

        returncode = self._run(self.session_command(plan))
        if returncode != 0:
            logger.error("%s connection failed: exit status %s", label, returncode)
            return ExitStatus.FAILURE

        return ExitStatus.SUCCESS

    def connect_many(self, plans: list[ConnectionPlan]) -> int:
        """Open one xpanes pane per plan."""
        logger.info("Connecting to %d instances using %s...", len(plans), MULTI_PANE_BINARY)

        if self.which(MULTI_PANE_BINARY) is None:
            logger.warning(
                "%s not found. Install with: brew install xpanes", MULTI_PANE_BINARY
            )
            logger.warning("Falling back to single instance connection...")
            return self.connect(plans[0])

        pane_commands = [shlex.join(self.session_command(plan)) for plan in plans]
        returncode = self._run([MULTI_PANE_BINARY, "-c", "{}", *pane_commands])

        if returncode != 0:
            logger.error("%s command failed: exit status %s", MULTI_PANE_BINARY, returncode)
            return ExitStatus.FAILURE

        return ExitStatus.SUCCESS

    def _run(self, args: list[str]) -> int:
        logger.debug("Running %s", shlex.join(args))

        try:
            with interactive_child():
                result = self.runner(args, check=False)
        except OSError as e:
            raise DispatchError(f"Failed to start {args[0]}: {e}") from e

        return result.returncode
