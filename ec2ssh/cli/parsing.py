"""CLI argument parsing and parameter conversion utilities."""

from __future__ import annotations

from typing import Any


def parse_list_parameter(
    value: str | list[str] | tuple[str, ...], strip: bool = True
) -> list[str]:
    """Parse a list-valued flag into a list of non-empty strings.

    Parameters
    ----------
    value : str | list[str] | tuple[str, ...]
        Comma-separated string, or the list/tuple Fire produces for
        ``--flag=[a,b]``
    strip : bool
        Strip surrounding whitespace from each entry. Blank entries are
        always dropped.

    Returns
    -------
    list[str]
        Non-empty entries in order
    """
    if isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    else:
        items = str(value).split(",")

    return [item.strip() if strip else item for item in items if item.strip()]


def parse_bool_parameter(value: str | bool, name: str) -> bool:
    """Parse a boolean flag that may arrive as a string.

    Parameters
    ----------
    value : str | bool
        Flag value - boolean or "true"/"false" string
    name : str
        Flag name used in the error message

    Returns
    -------
    bool
        Parsed value

    Raises
    ------
    ValueError
        If the string is not "true" or "false"
    """
    if isinstance(value, bool):
        return value

    if isinstance(value, str):
        lowered = value.lower()
        if lowered not in ("true", "false"):
            raise ValueError(f"{name} must be 'true' or 'false', got: {value}")
        return lowered == "true"

    raise ValueError(f"Unexpected type for {name}: {type(value)}")


def build_cli_overrides(
    region: str | list[str] | tuple[str, ...] | None,
    use_private_ip: str | bool | None,
    filters: str | list[str] | tuple[str, ...] | None,
) -> dict[str, Any]:
    """Convert CLI options into configuration overrides.

    Options left unset are omitted so file values still apply.

    Parameters
    ----------
    region : str | list[str] | tuple[str, ...] | None
        Region or regions to query
    use_private_ip : str | bool | None
        Connect via private addresses
    filters : str | list[str] | tuple[str, ...] | None
        DescribeInstances filters as ``Name=Value`` strings

    Returns
    -------
    dict[str, Any]
        Overrides keyed like the configuration file
    """
    overrides: dict[str, Any] = {}

    if region is not None:
        overrides["regions"] = parse_list_parameter(region)

    if use_private_ip is not None:
        overrides["use_private_ip"] = parse_bool_parameter(use_private_ip, "use_private_ip")

    if filters is not None:
        overrides["filters"] = parse_list_parameter(filters, strip=False)

    return overrides


__all__ = [
    "parse_list_parameter",
    "parse_bool_parameter",
    "build_cli_overrides",
]
