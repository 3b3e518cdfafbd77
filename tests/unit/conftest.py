"""Pytest configuration and fixtures for ec2ssh tests."""

import os
import sys
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import yaml

tests_root = Path(__file__).parent
if str(tests_root) not in sys.path:
    sys.path.insert(0, str(tests_root))

from fakes import FakeRunner  # noqa: E402

from ec2ssh.models import InstanceRecord  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Keep tests away from the developer's AWS and ec2ssh configuration.

    Yields
    ------
    None
        Control back to test with AWS config, credentials and ec2ssh config
        pointing at empty temporary paths
    """
    monkeypatch.setenv("AWS_CONFIG_FILE", str(tmp_path / "aws-config"))
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "aws-credentials"))
    monkeypatch.setenv("EC2SSH_CONFIG", str(tmp_path / "ec2ssh.yaml"))
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.delenv("AWS_DEFAULT_PROFILE", raising=False)
    monkeypatch.delenv("EC2SSH_DEBUG", raising=False)

    yield


@pytest.fixture
def aws_credentials(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Set mock AWS credentials in environment variables.

    Yields
    ------
    None
        Control back to test after setting credentials
    """
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")

    yield


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Return the ec2ssh config path selected through EC2SSH_CONFIG.

    Parameters
    ----------
    tmp_path : Path
        Pytest temporary directory path

    Returns
    -------
    Path
        Path to temporary config file (not yet created)
    """
    return tmp_path / "ec2ssh.yaml"


@pytest.fixture
def write_config(config_file: Path) -> Callable[[dict[str, Any]], None]:
    """Helper fixture to write config data to file.

    Returns
    -------
    callable
        Function that takes config_data dict and writes to file
    """

    def _write(config_data: dict[str, Any]) -> None:
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

    return _write


@pytest.fixture
def aws_config(tmp_path: Path) -> Callable[[str], Path]:
    """Helper fixture to write the AWS shared config file.

    Returns
    -------
    callable
        Function that takes INI text and writes it to AWS_CONFIG_FILE
    """

    def _write(content: str) -> Path:
        path = tmp_path / "aws-config"
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def make_record() -> Callable[..., InstanceRecord]:
    """Factory for InstanceRecord values with sensible defaults."""

    def _make(instance_id: str = "i-0123456789abcdef0", **kwargs: Any) -> InstanceRecord:
        kwargs.setdefault("state", "running")
        kwargs.setdefault("region", "us-east-1")
        tags = kwargs.pop("tags", {})
        if isinstance(tags, dict):
            tags = tuple(tags.items())
        return InstanceRecord(instance_id=instance_id, tags=tags, **kwargs)

    return _make


@pytest.fixture
def runner() -> FakeRunner:
    """Process runner that records calls and exits 0."""
    return FakeRunner()
