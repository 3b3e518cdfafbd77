"""Data types shared by discovery, resolution and session dispatch."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ec2ssh.providers.exceptions import ProviderError


class FilterSyntaxError(ValueError):
    """Raised when a user-supplied filter is not a single ``Name=Value`` pair."""


@dataclass(frozen=True)
class InstanceRecord:
    """Immutable snapshot of one compute instance.

    Parameters
    ----------
    instance_id : str
        Instance identifier, unique within a region
    state : str
        Lifecycle state name (pending, running or shutting-down)
    region : str
        Region the instance was discovered in
    instance_type : str | None
        Instance type, e.g. ``t3.micro``
    private_ip : str | None
        Private IPv4 address
    public_ip : str | None
        Public IPv4 address
    public_dns : str | None
        Public DNS hostname
    tags : tuple[tuple[str, str], ...]
        Tag key/value pairs in provider order, keys unique
    """

    instance_id: str
    state: str
    region: str = ""
    instance_type: str | None = None
    private_ip: str | None = None
    public_ip: str | None = None
    public_dns: str | None = None
    tags: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        if not self.instance_id:
            raise ValueError("InstanceRecord requires a non-empty instance_id")

    @property
    def tag_map(self) -> dict[str, str]:
        """Return tags as a new dictionary."""
        return dict(self.tags)

    def tag(self, key: str) -> str | None:
        """Return the value of tag ``key`` or None when absent."""
        for tag_key, tag_value in self.tags:
            if tag_key == key:
                return tag_value
        return None

    @property
    def name(self) -> str:
        return self.tag("Name") or ""


@dataclass(frozen=True)
class FilterPredicate:
    """Exact-match DescribeInstances filter."""

    name: str
    value: str

    @classmethod
    def parse(cls, raw: str) -> FilterPredicate:
        """Parse a ``Name=Value`` string.

        Parameters
        ----------
        raw : str
            Filter string as written by the user, e.g. ``tag:Team=infra``

        Returns
        -------
        FilterPredicate
            Parsed predicate

        Raises
        ------
        FilterSyntaxError
            If the string does not contain exactly one '=' or the name is empty
        """
        separators = raw.count("=")
        if separators != 1:
            raise FilterSyntaxError(
                f"Filters must contain exactly one '='. Filter \"{raw}\" has {separators}"
            )

        name, value = raw.split("=", 1)
        name = name.strip()
        if not name:
            raise FilterSyntaxError(f"Filter \"{raw}\" has an empty name")

        return cls(name=name, value=value)

    def to_boto(self) -> dict[str, object]:
        return {"Name": self.name, "Values": [self.value]}


@dataclass(frozen=True)
class RegionQuery:
    """One region's inventory query: region plus ordered user filters."""

    region: str
    filters: tuple[FilterPredicate, ...] = ()

    @classmethod
    def from_strings(cls, region: str, filters: list[str] | tuple[str, ...]) -> RegionQuery:
        """Build a query, validating every filter string up front.

        Raises
        ------
        FilterSyntaxError
            If any filter is malformed
        """
        return cls(region=region, filters=tuple(FilterPredicate.parse(f) for f in filters))


class TransportKind(str, Enum):
    """How a shell session reaches an instance."""

    DIRECT_SHELL = "ssh"
    AGENT_SESSION = "ssm"


@dataclass(frozen=True)
class ConnectionPlan:
    """Resolved transport and target for one selected instance."""

    kind: TransportKind
    target: str
    instance_id: str = ""

    def __post_init__(self) -> None:
        if not self.target:
            raise ValueError("ConnectionPlan requires a non-empty target")

    @property
    def is_agent_session(self) -> bool:
        return self.kind is TransportKind.AGENT_SESSION


@dataclass(frozen=True)
class FetchOutcome:
    """Result of fetching one region: either instances or an error."""

    region: str
    instances: tuple[InstanceRecord, ...] = field(default_factory=tuple)
    error: ProviderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
