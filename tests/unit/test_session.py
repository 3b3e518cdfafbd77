"""Unit tests for ssh / SSM session dispatch."""

import json
import logging

import pytest
from fakes import FakeRunner

from ec2ssh.constants import ExitStatus
from ec2ssh.models import ConnectionPlan, TransportKind
from ec2ssh.services.session import (
    DispatchError,
    SessionDispatcher,
    build_ssh_command,
    build_ssm_command,
)

SSH_PLAN = ConnectionPlan(kind=TransportKind.DIRECT_SHELL, target="10.0.0.5", instance_id="i-1")
SSH_PLAN_2 = ConnectionPlan(kind=TransportKind.DIRECT_SHELL, target="10.0.0.6", instance_id="i-2")
SSM_PLAN = ConnectionPlan(kind=TransportKind.AGENT_SESSION, target="i-123", instance_id="i-123")


def no_xpanes(binary: str) -> str | None:
    return None


def has_xpanes(binary: str) -> str | None:
    return f"/usr/local/bin/{binary}"


def test_build_ssh_command() -> None:
    """Test direct shells run plain ssh against the target."""
    assert build_ssh_command(SSH_PLAN) == ["ssh", "10.0.0.5"]


def test_build_ssm_command_plain() -> None:
    """Test a plain SSM session command."""
    assert build_ssm_command(SSM_PLAN) == ["aws", "ssm", "start-session", "--target", "i-123"]


def test_build_ssm_command_with_profile_and_startup() -> None:
    """Test the profile and startup command are forwarded."""
    args = build_ssm_command(SSM_PLAN, profile="prod", startup_command="bash -l")

    assert args == [
        "aws",
        "ssm",
        "start-session",
        "--target",
        "i-123",
        "--profile",
        "prod",
        "--document-name",
        "AWS-StartInteractiveCommand",
        "--parameters",
        'command=["bash -l"]',
    ]


def test_build_ssm_command_escapes_startup_command() -> None:
    """Test quotes and backslashes in the startup command stay valid JSON."""
    startup = 'sudo -u app sh -c "cd C:\\tmp && bash"'
    args = build_ssm_command(SSM_PLAN, startup_command=startup)

    parameters = args[-1]
    assert parameters.startswith("command=")
    assert json.loads(parameters[len("command=") :]) == [startup]


def test_print_only_agent_session(capsys: pytest.CaptureFixture[str]) -> None:
    """Test print-only mode emits the SSM command and spawns nothing."""
    runner = FakeRunner()
    dispatcher = SessionDispatcher(profile="prod", runner=runner, which=has_xpanes)

    status = dispatcher.dispatch([SSM_PLAN], print_only=True)

    assert status == ExitStatus.SUCCESS
    assert capsys.readouterr().out == "aws ssm start-session --target i-123 --profile prod\n"
    assert runner.calls == []


def test_print_only_many_plans(capsys: pytest.CaptureFixture[str]) -> None:
    """Test print-only mode emits one line per plan in order."""
    runner = FakeRunner()
    dispatcher = SessionDispatcher(runner=runner)

    dispatcher.dispatch([SSH_PLAN, SSM_PLAN, SSH_PLAN_2], print_only=True)

    assert capsys.readouterr().out.splitlines() == [
        "ssh 10.0.0.5",
        "aws ssm start-session --target i-123",
        "ssh 10.0.0.6",
    ]
    assert runner.calls == []


def test_dispatch_no_plans(caplog: pytest.LogCaptureFixture) -> None:
    """Test an empty plan list fails without spawning."""
    runner = FakeRunner()

    with caplog.at_level(logging.ERROR):
        status = SessionDispatcher(runner=runner).dispatch([])

    assert status == ExitStatus.FAILURE
    assert "No valid connection details found" in caplog.text
    assert runner.calls == []


def test_dispatch_single_ssh() -> None:
    """Test one plan runs one foreground ssh."""
    runner = FakeRunner()

    status = SessionDispatcher(runner=runner, which=has_xpanes).dispatch([SSH_PLAN])

    assert status == ExitStatus.SUCCESS
    assert runner.commands == [["ssh", "10.0.0.5"]]
    assert runner.calls[0][1] == {"check": False}


def test_dispatch_single_ssm_uses_startup_command() -> None:
    """Test SSM sessions start the configured command."""
    runner = FakeRunner()
    dispatcher = SessionDispatcher(profile="prod", ssm_command="zsh", runner=runner)

    dispatcher.dispatch([SSM_PLAN])

    assert runner.commands == [
        build_ssm_command(SSM_PLAN, profile="prod", startup_command="zsh")
    ]


def test_dispatch_single_failure(caplog: pytest.LogCaptureFixture) -> None:
    """Test a failing session is reported."""
    runner = FakeRunner(returncodes={"ssh": 255})

    with caplog.at_level(logging.ERROR):
        status = SessionDispatcher(runner=runner).dispatch([SSH_PLAN])

    assert status == ExitStatus.FAILURE
    assert "SSH connection failed" in caplog.text


def test_dispatch_many_with_xpanes() -> None:
    """Test several plans open one xpanes pane each."""
    runner = FakeRunner()
    dispatcher = SessionDispatcher(profile="prod", runner=runner, which=has_xpanes)

    status = dispatcher.dispatch([SSH_PLAN, SSM_PLAN])

    assert status == ExitStatus.SUCCESS
    assert runner.commands == [
        [
            "xpanes",
            "-c",
            "{}",
            "ssh 10.0.0.5",
            "aws ssm start-session --target i-123 --profile prod "
            "--document-name AWS-StartInteractiveCommand "
            "--parameters 'command=[\"bash -l\"]'",
        ]
    ]


def test_dispatch_many_without_xpanes_falls_back(caplog: pytest.LogCaptureFixture) -> None:
    """Test a missing xpanes degrades to the first plan only."""
    runner = FakeRunner()

    with caplog.at_level(logging.INFO):
        status = SessionDispatcher(runner=runner, which=no_xpanes).dispatch([SSH_PLAN, SSH_PLAN_2])

    assert status == ExitStatus.SUCCESS
    assert runner.commands == [["ssh", "10.0.0.5"]]
    assert "xpanes not found" in caplog.text
    assert "Falling back to single instance connection" in caplog.text


def test_dispatch_many_xpanes_failure() -> None:
    """Test a failing xpanes run is reported."""
    runner = FakeRunner(returncodes={"xpanes": 1})

    status = SessionDispatcher(runner=runner, which=has_xpanes).dispatch([SSH_PLAN, SSH_PLAN_2])

    assert status == ExitStatus.FAILURE


def test_dispatch_spawn_failure() -> None:
    """Test an unstartable session binary raises DispatchError."""
    runner = FakeRunner(errors={"ssh": FileNotFoundError("ssh")})

    with pytest.raises(DispatchError, match="Failed to start ssh"):
        SessionDispatcher(runner=runner).dispatch([SSH_PLAN])
