"""Lookups in the AWS shared configuration file."""

from __future__ import annotations

import logging
from typing import Any

import botocore.session
from botocore.exceptions import BotoCoreError

from ec2ssh.constants import MAX_PROFILES_IN_HINT

logger = logging.getLogger(__name__)


def _profiles_config() -> dict[str, dict[str, Any]]:
    """Return the ``profiles`` section of the parsed AWS config.

    Honors ``AWS_CONFIG_FILE``. Returns an empty dict when the file is
    missing or cannot be parsed.
    """
    try:
        full_config = botocore.session.Session().full_config
    except BotoCoreError as e:
        logger.debug("Unable to read AWS config: %s", e)
        return {}

    return full_config.get("profiles", {})


def list_profiles() -> list[str]:
    """List profile names defined in the AWS config, in file order."""
    return list(_profiles_config().keys())


def region_for_profile(profile: str | None) -> str | None:
    """Return the ``region`` configured for ``profile``, if any."""
    if not profile:
        return None

    return _profiles_config().get(profile, {}).get("region") or None


def sso_session_for_profile(profile: str | None) -> str | None:
    """Return the ``sso_session`` name referenced by ``profile``, if any.

    Parameters
    ----------
    profile : str | None
        AWS profile name

    Returns
    -------
    str | None
        SSO session name, or None if the profile is unknown, unset, or does
        not use an ``sso-session`` section
    """
    if not profile:
        return None

    return _profiles_config().get(profile, {}).get("sso_session") or None


def format_profiles(profiles: list[str], limit: int = MAX_PROFILES_IN_HINT) -> str:
    """Format profile names for a usage hint.

    Parameters
    ----------
    profiles : list[str]
        Profile names
    limit : int
        Maximum number of names to show before summarising the rest

    Returns
    -------
    str
        E.g. ``"a, b, c (and 2 more)"`` or ``"none found"``
    """
    if not profiles:
        return "none found"

    shown = ", ".join(profiles[:limit])
    remaining = len(profiles) - limit
    if remaining > 0:
        return f"{shown} (and {remaining} more)"
    return shown
