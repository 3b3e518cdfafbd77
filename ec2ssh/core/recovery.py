"""Detection of expired single sign-on sessions and automatic re-login."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from typing import Any

from botocore.exceptions import SSOError, TokenRetrievalError

from ec2ssh.constants import AWS_CLI_BINARY
from ec2ssh.core.profiles import sso_session_for_profile
from ec2ssh.core.signals import interactive_child

logger = logging.getLogger(__name__)

EXPIRED_SSO_MARKERS = (
    "failed to refresh cached credentials",
    "cached SSO token",
    "sso/cache",
    "Token has expired and refresh failed",
    "SSO session associated with this profile has expired",
    "Error loading SSO Token",
)
"""Substrings of provider error messages that indicate a stale SSO token.

These mirror the AWS CLI/SDK wording and may need updating when that wording
changes. Keep every rule for recognising an expired session in this module.
"""


def is_expired_sso_error(error: BaseException) -> bool:
    """Return True if ``error`` means the cached SSO token has expired.

    Walks the ``__cause__``/``__context__`` chain, matching botocore SSO
    exception types and the known message substrings.

    Parameters
    ----------
    error : BaseException
        Error raised by discovery

    Returns
    -------
    bool
        True when an ``aws sso login`` is likely to fix the failure
    """
    seen: set[int] = set()
    current: BaseException | None = error

    while current is not None and id(current) not in seen:
        seen.add(id(current))

        if isinstance(current, (SSOError, TokenRetrievalError)):
            return True

        message = str(current)
        if any(marker in message for marker in EXPIRED_SSO_MARKERS):
            return True

        current = current.__cause__ or current.__context__

    return False


class CredentialRecovery:
    """Re-authenticate an expired SSO session through the AWS CLI.

    Parameters
    ----------
    profile : str | None
        Active AWS profile
    session_resolver : Callable[[str | None], str | None] | None
        Maps a profile to its ``sso_session`` name. Defaults to reading the
        AWS shared config
    runner : Callable[..., Any] | None
        Process runner with the ``subprocess.run`` signature
    """

    def __init__(
        self,
        profile: str | None,
        session_resolver: Callable[[str | None], str | None] | None = None,
        runner: Callable[..., Any] | None = None,
    ) -> None:
        self.profile = profile
        self.session_resolver = session_resolver or sso_session_for_profile
        self.runner = runner or subprocess.run

    def try_recover(self, error: BaseException) -> bool:
        """Attempt to recover from ``error``.

        Parameters
        ----------
        error : BaseException
            Error raised by discovery

        Returns
        -------
        bool
            True if the error was an expired SSO session and ``aws sso login``
            succeeded; the caller should retry discovery once
        """
        if not is_expired_sso_error(error):
            return False

        logger.info(
            "SSO session expired. Running 'aws sso login' for profile '%s'...",
            self.profile or "default",
        )

        sso_session = self.session_resolver(self.profile)
        if not sso_session:
            logger.error(
                "Could not determine SSO session for profile '%s'. "
                "Please run 'aws sso login --profile %s' manually.",
                self.profile or "default",
                self.profile or "default",
            )
            return False

        args = [AWS_CLI_BINARY, "sso", "login", "--sso-session", sso_session]

        try:
            with interactive_child():
                result = self.runner(args, check=False)
        except OSError as e:
            logger.error("SSO login failed: %s", e)
            return False

        if result.returncode != 0:
            logger.error("SSO login failed: exit status %s", result.returncode)
            return False

        logger.info("SSO login successful. Retrying...")
        return True
