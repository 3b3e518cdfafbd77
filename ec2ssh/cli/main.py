"""CLI entry point for ec2ssh."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable
from typing import Any

import fire
from omegaconf.errors import OmegaConfBaseException

from ec2ssh.constants import DEBUG_ENV_VAR, ExitStatus
from ec2ssh.core.aggregator import DiscoveryError
from ec2ssh.core.selection import SelectionError
from ec2ssh.core.signals import install_exit_handlers
from ec2ssh.logging import StreamFormatter, StreamRoutingFilter
from ec2ssh.providers import ProviderCredentialsError
from ec2ssh.providers.aws.utils import get_aws_credentials_error_message
from ec2ssh.services.session import DispatchError


def get_ec2ssh_base_class() -> type:
    """Get Ec2ssh base class on-demand to avoid circular imports.

    Returns
    -------
    type
        Ec2ssh base class
    """
    from ec2ssh.__main__ import Ec2ssh

    return Ec2ssh


class Ec2sshCLI:
    """CLI wrapper that turns connect results into process exit codes.

    Defined as a factory that creates a subclass of Ec2ssh at runtime to
    avoid circular import issues.

    Parameters
    ----------
    session_factory : Callable[..., Any] | None
        Optional factory for boto3 sessions
    runner : Callable[..., Any] | None
        Optional process runner with the ``subprocess.run`` signature
    """

    _cached_class: type | None = None

    def __new__(
        cls,
        session_factory: Callable[..., Any] | None = None,
        runner: Callable[..., Any] | None = None,
    ) -> Any:
        if cls._cached_class is None:
            Ec2ssh = get_ec2ssh_base_class()

            class Ec2sshCLIImpl(Ec2ssh):
                """CLI wrapper implementation for Ec2ssh."""

                def connect(
                    self,
                    profile: str | None = None,
                    region: str | list[str] | tuple[str, ...] | None = None,
                    use_private_ip: str | bool | None = None,
                    filters: str | list[str] | tuple[str, ...] | None = None,
                    print_only: bool = False,
                ) -> None:
                    """Pick instances interactively and open shell sessions to them.

                    Parameters
                    ----------
                    profile : str | None
                        AWS profile from the shared config
                    region : str | list[str] | tuple[str, ...] | None
                        Region or comma-separated regions to search
                    use_private_ip : str | bool | None
                        Connect to private IPs (true) or public DNS/IP (false)
                    filters : str | list[str] | tuple[str, ...] | None
                        DescribeInstances filters, e.g. tag:Team=infra
                    print_only : bool
                        Print the ssh / aws ssm commands instead of running them
                    """
                    exit_code = super().connect(
                        profile=profile,
                        region=region,
                        use_private_ip=use_private_ip,
                        filters=filters,
                        print_only=print_only,
                    )

                    if exit_code != ExitStatus.SUCCESS:
                        sys.exit(int(exit_code))

            cls._cached_class = Ec2sshCLIImpl

        return cls._cached_class(session_factory=session_factory, runner=runner)


def handle_credentials_error(error: Exception, debug_mode: bool, profile: str | None) -> None:
    """Handle missing or expired credentials.

    Parameters
    ----------
    error : Exception
        The credentials error (or the discovery error wrapping it)
    debug_mode : bool
        Whether debug mode is enabled
    profile : str | None
        Profile named on the command line, if any

    Raises
    ------
    Exception
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise error

    print(str(error), file=sys.stderr)
    print(f"\n{get_aws_credentials_error_message(profile)}", file=sys.stderr)
    sys.exit(ExitStatus.FAILURE)


def handle_value_error(error: Exception, debug_mode: bool) -> None:
    """Handle configuration errors.

    Raises
    ------
    Exception
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise error

    print(f"Configuration error: {error}", file=sys.stderr)
    sys.exit(ExitStatus.CONFIG_ERROR)


def handle_runtime_error(error: Exception, debug_mode: bool) -> None:
    """Handle discovery, selection and dispatch failures.

    Raises
    ------
    Exception
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise error

    print(f"Error: {error}", file=sys.stderr)
    sys.exit(ExitStatus.FAILURE)


def _profile_from_argv(argv: list[str]) -> str | None:
    if len(argv) > 2 and argv[1] == "connect" and not argv[2].startswith("-"):
        return argv[2]
    return None


def configure_logging(debug_mode: bool) -> None:
    """Route log records to stdout/stderr with severity prefixes."""
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(StreamFormatter("%(message)s"))
    stdout_handler.addFilter(StreamRoutingFilter("stdout"))

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(StreamFormatter("%(message)s"))
    stderr_handler.addFilter(StreamRoutingFilter("stderr"))

    logging.basicConfig(
        level=logging.DEBUG if debug_mode else logging.INFO,
        handlers=[stdout_handler, stderr_handler],
    )

    for noisy in ["botocore", "boto3", "urllib3"]:
        logging.getLogger(noisy).setLevel(logging.WARNING)


def main() -> None:
    """Entry point for Fire CLI with graceful error handling.

    Fire maps the Ec2ssh methods to subcommands (connect, profiles,
    completion, version, init). Errors escaping a command are turned into
    a message on stderr and a non-zero exit status; set EC2SSH_DEBUG=1 to
    see the traceback instead.
    """
    debug_mode = os.environ.get(DEBUG_ENV_VAR) == "1"
    configure_logging(debug_mode)
    install_exit_handlers()

    try:
        fire.Fire(Ec2sshCLI())
    except ProviderCredentialsError as e:
        handle_credentials_error(e, debug_mode, _profile_from_argv(sys.argv))
    except DiscoveryError as e:
        if isinstance(e.error, ProviderCredentialsError):
            handle_credentials_error(e, debug_mode, _profile_from_argv(sys.argv))
        handle_runtime_error(e, debug_mode)
    except (ValueError, OmegaConfBaseException) as e:
        handle_value_error(e, debug_mode)
    except (SelectionError, DispatchError, RuntimeError) as e:
        handle_runtime_error(e, debug_mode)
