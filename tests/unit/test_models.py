"""Unit tests for ec2ssh data types."""

import pytest

from ec2ssh.models import (
    ConnectionPlan,
    FetchOutcome,
    FilterPredicate,
    FilterSyntaxError,
    InstanceRecord,
    RegionQuery,
    TransportKind,
)
from ec2ssh.providers.exceptions import ProviderAPIError


@pytest.mark.parametrize(
    "raw,name,value",
    [
        ("tag:Team=infra", "tag:Team", "infra"),
        ("instance-type=t3.micro", "instance-type", "t3.micro"),
        (" tag:Env=prod", "tag:Env", "prod"),
        ("tag:Empty=", "tag:Empty", ""),
    ],
)
def test_filter_parse_accepts_single_separator(raw: str, name: str, value: str) -> None:
    """Test a string with exactly one '=' parses into name and value."""
    predicate = FilterPredicate.parse(raw)

    assert predicate.name == name
    assert predicate.value == value


def test_filter_parse_keeps_value_whitespace() -> None:
    """Test only the name is trimmed so padded tag values can still match."""
    predicate = FilterPredicate.parse(" tag:Env = prod ")

    assert predicate.name == "tag:Env"
    assert predicate.value == " prod "
    assert predicate.to_boto() == {"Name": "tag:Env", "Values": [" prod "]}


@pytest.mark.parametrize("raw", ["bad", "", "a=b=c", "tag:x==y", "==", "=value"])
def test_filter_parse_rejects_malformed(raw: str) -> None:
    """Test strings without exactly one '=' or with an empty name are rejected."""
    with pytest.raises(FilterSyntaxError):
        FilterPredicate.parse(raw)


def test_filter_syntax_error_is_value_error() -> None:
    """Test filter errors are reported as configuration errors."""
    assert issubclass(FilterSyntaxError, ValueError)


def test_filter_to_boto() -> None:
    """Test predicates convert to the DescribeInstances filter shape."""
    predicate = FilterPredicate.parse("tag:Team=infra")

    assert predicate.to_boto() == {"Name": "tag:Team", "Values": ["infra"]}


def test_region_query_from_strings_keeps_order() -> None:
    """Test filters keep the order they were given in."""
    query = RegionQuery.from_strings("eu-west-1", ["tag:A=1", "tag:B=2"])

    assert query.region == "eu-west-1"
    assert [f.name for f in query.filters] == ["tag:A", "tag:B"]


def test_region_query_from_strings_rejects_any_bad_filter() -> None:
    """Test one malformed filter fails the whole query."""
    with pytest.raises(FilterSyntaxError, match="a=b=c"):
        RegionQuery.from_strings("us-east-1", ["tag:A=1", "a=b=c"])


def test_instance_record_requires_id() -> None:
    """Test an empty instance id is rejected."""
    with pytest.raises(ValueError):
        InstanceRecord(instance_id="", state="running")


def test_instance_record_tags() -> None:
    """Test tag lookup helpers."""
    record = InstanceRecord(
        instance_id="i-1",
        state="running",
        tags=(("Name", "web-1"), ("Team", "infra")),
    )

    assert record.name == "web-1"
    assert record.tag("Team") == "infra"
    assert record.tag("Missing") is None
    assert record.tag_map == {"Name": "web-1", "Team": "infra"}


def test_instance_record_without_name_tag() -> None:
    """Test name falls back to an empty string."""
    record = InstanceRecord(instance_id="i-1", state="running")

    assert record.name == ""


def test_instance_record_is_immutable() -> None:
    """Test records are frozen snapshots."""
    record = InstanceRecord(instance_id="i-1", state="running")

    with pytest.raises(AttributeError):
        record.state = "stopped"  # type: ignore[misc]


def test_connection_plan_requires_target() -> None:
    """Test a plan without a target cannot be built."""
    with pytest.raises(ValueError):
        ConnectionPlan(kind=TransportKind.DIRECT_SHELL, target="")


def test_connection_plan_kind() -> None:
    """Test agent session detection."""
    ssm = ConnectionPlan(kind=TransportKind.AGENT_SESSION, target="i-1")
    ssh = ConnectionPlan(kind=TransportKind.DIRECT_SHELL, target="10.0.0.1")

    assert ssm.is_agent_session
    assert not ssh.is_agent_session


def test_fetch_outcome_ok() -> None:
    """Test outcomes report success only without an error."""
    assert FetchOutcome(region="us-east-1").ok
    assert not FetchOutcome(region="us-east-1", error=ProviderAPIError("boom")).ok
