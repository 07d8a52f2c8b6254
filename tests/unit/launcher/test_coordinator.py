"""Unit tests for the launch/validation race."""

from __future__ import annotations

import os
import subprocess  # nosec B404
import sys
import textwrap
import threading
import time
from datetime import UTC, datetime
from pathlib import Path

import pytest

from bedlaunch.catalog.errors import CatalogErrorCode, catalog_unavailable
from bedlaunch.catalog.validation import ValidationReport
from bedlaunch.launcher.coordinator import (
    CONFIG_ERROR_EXIT_CODE,
    ChildExited,
    LaunchCoordinator,
    LaunchFailed,
    LaunchFailureKind,
    LaunchRequest,
    invalid_models_message,
)
from tests.unit.helpers import SONNET_ID, FakeRunner, RecordingSink

_STALE = "global.anthropic.claude-3-opus-20240229-v1:0"
_FAILED = ValidationReport(passed=False, invalid=(_STALE,), available=(SONNET_ID,))


def _request() -> LaunchRequest:
    return LaunchRequest(
        profile_name="work",
        executable="/usr/bin/claude",
        args=("--resume",),
        env={"AWS_REGION": "us-west-2"},
        identifiers=(_STALE, "", ""),
    )


def _exit_later(runner: FakeRunner, code: int, delay: float) -> None:
    threading.Timer(delay, runner.exit, args=(code,)).start()


@pytest.mark.unit
def test_process_exit_before_validation_reports_success() -> None:
    """A child that exits while validation is pending is never failed."""
    # Arrange - validation blocked, child exits after 50ms
    runner = FakeRunner()
    release = threading.Event()

    def validator() -> ValidationReport:
        release.wait(5)
        return _FAILED

    sink = RecordingSink()
    coordinator = LaunchCoordinator(runner=runner, validator=validator, usage_sink=sink)
    _exit_later(runner, 0, 0.05)

    # Act - launch
    try:
        outcome = coordinator.launch(_request())
    finally:
        release.set()

    # Assert - success, no kill, session recorded
    assert outcome == ChildExited(exit_code=0)
    assert outcome.host_exit_code == 0
    assert runner.killed is False
    assert sink.sessions[0]["exit_code"] == 0
    assert sink.sessions[0]["profile_name"] == "work"


@pytest.mark.unit
def test_failed_validation_kills_running_process() -> None:
    """Invalid identifiers reported mid-session kill the child."""
    # Arrange - validation fails after 10ms, child never exits on its own
    runner = FakeRunner()

    def validator() -> ValidationReport:
        time.sleep(0.01)
        return _FAILED

    sink = RecordingSink()
    coordinator = LaunchCoordinator(runner=runner, validator=validator, usage_sink=sink)

    # Act - launch
    outcome = coordinator.launch(_request())

    # Assert - killed, configuration failure surfaced
    assert isinstance(outcome, LaunchFailed)
    assert runner.killed is True
    assert outcome.kind == LaunchFailureKind.INVALID_MODELS
    assert outcome.invalid == (_STALE,)
    assert outcome.host_exit_code == CONFIG_ERROR_EXIT_CODE
    assert _STALE in outcome.message
    assert f"  - {SONNET_ID}" in outcome.message


@pytest.mark.unit
def test_child_is_started_before_validation_and_gets_request() -> None:
    """The child receives the resolved binary, args, and env."""
    # Arrange - passing validation, child exits with 3
    runner = FakeRunner()
    coordinator = LaunchCoordinator(
        runner=runner,
        validator=ValidationReport.ok,
        usage_sink=RecordingSink(),
    )
    _exit_later(runner, 3, 0.05)

    # Act - launch
    outcome = coordinator.launch(_request())

    # Assert - exit code passed through
    assert outcome == ChildExited(exit_code=3)
    assert runner.started == [
        ("/usr/bin/claude", ("--resume",), {"AWS_REGION": "us-west-2"})
    ]


@pytest.mark.unit
def test_validation_timeout_continues_unvalidated() -> None:
    """Slow validation is abandoned and the session continues."""
    # Arrange - validation slower than its timeout
    runner = FakeRunner()
    release = threading.Event()

    def validator() -> ValidationReport:
        release.wait(5)
        return _FAILED

    coordinator = LaunchCoordinator(
        runner=runner,
        validator=validator,
        usage_sink=RecordingSink(),
        validation_timeout_seconds=0.02,
    )
    _exit_later(runner, 0, 0.2)

    # Act - launch, releasing the failing report after the timeout
    threading.Timer(0.1, release.set).start()
    outcome = coordinator.launch(_request())

    # Assert - not killed
    assert outcome == ChildExited(exit_code=0)
    assert runner.killed is False


@pytest.mark.unit
def test_unavailable_catalog_does_not_kill_session() -> None:
    """Catalog fetch failures during validation are warnings only."""
    # Arrange - validator raising catalog_unavailable
    runner = FakeRunner()

    def validator() -> ValidationReport:
        raise catalog_unavailable("failed to list inference profiles")

    coordinator = LaunchCoordinator(
        runner=runner, validator=validator, usage_sink=RecordingSink()
    )
    _exit_later(runner, 0, 0.05)

    # Act - launch
    outcome = coordinator.launch(_request())

    # Assert - session ran to completion
    assert outcome == ChildExited(exit_code=0)
    assert runner.killed is False
    assert catalog_unavailable("x").code == CatalogErrorCode.UNAVAILABLE


@pytest.mark.unit
def test_unexpected_validator_error_does_not_kill_session() -> None:
    """Validator bugs are logged; only invalid identifiers end a session."""
    # Arrange - validator raising a non-catalog error, child exits later
    runner = FakeRunner()

    def validator() -> ValidationReport:
        raise RuntimeError("unexpected response shape")

    sink = RecordingSink()
    coordinator = LaunchCoordinator(runner=runner, validator=validator, usage_sink=sink)
    _exit_later(runner, 3, 0.1)

    # Act - launch
    outcome = coordinator.launch(_request())

    # Assert - child's own exit code survives, nothing killed
    assert outcome == ChildExited(exit_code=3)
    assert runner.killed is False
    assert sink.sessions[0]["exit_code"] == 3


@pytest.mark.unit
def test_abandoned_validation_does_not_delay_host_exit() -> None:
    """The launcher process exits promptly even while validation still runs."""
    # Arrange - host script with a 4s validator, 1s timeout and an instant child
    src_dir = Path(__file__).resolve().parents[3] / "src"
    script = textwrap.dedent(
        """
        import sys
        import time

        from bedlaunch.catalog.validation import ValidationReport
        from bedlaunch.launcher.coordinator import LaunchCoordinator, LaunchRequest
        from bedlaunch.launcher.process import SubprocessRunner
        from bedlaunch.usage.tracker import NullUsageSink

        def validator():
            time.sleep(4)
            return ValidationReport.ok()

        coordinator = LaunchCoordinator(
            runner=SubprocessRunner(),
            validator=validator,
            usage_sink=NullUsageSink(),
            validation_timeout_seconds=1,
        )
        outcome = coordinator.launch(
            LaunchRequest(
                profile_name="work",
                executable=sys.executable,
                args=("-c", "pass"),
                env={},
                identifiers=("", "", ""),
            )
        )
        sys.exit(outcome.host_exit_code)
        """
    )
    python_path = os.pathsep.join(filter(None, [str(src_dir), os.environ.get("PYTHONPATH")]))
    env = {**os.environ, "PYTHONPATH": python_path}

    # Act - run the host and time it end to end
    started = time.monotonic()
    completed = subprocess.run(  # nosec B603
        [sys.executable, "-c", script],
        env=env,
        capture_output=True,
        text=True,
        timeout=30,
        check=False,
    )
    elapsed = time.monotonic() - started

    # Assert - host exited with the child's code well before the validator finished
    assert completed.returncode == 0, completed.stderr
    assert elapsed < 3.0


@pytest.mark.unit
def test_usage_sink_failure_never_fails_launch() -> None:
    """Usage recording errors are logged and swallowed."""
    runner = FakeRunner()
    coordinator = LaunchCoordinator(
        runner=runner,
        validator=ValidationReport.ok,
        usage_sink=RecordingSink(error=OSError("disk full")),
    )
    _exit_later(runner, 0, 0.01)

    outcome = coordinator.launch(_request())

    assert outcome == ChildExited(exit_code=0)


@pytest.mark.unit
def test_session_timestamps_come_from_clock() -> None:
    """Recorded sessions use the injected clock."""
    # Arrange - fixed clock
    moment = datetime(2025, 1, 1, tzinfo=UTC)
    runner = FakeRunner()
    sink = RecordingSink()
    coordinator = LaunchCoordinator(
        runner=runner,
        validator=ValidationReport.ok,
        usage_sink=sink,
        clock=lambda: moment,
    )
    _exit_later(runner, 0, 0.01)

    # Act - launch
    coordinator.launch(_request())

    # Assert - stamps and identifiers
    assert sink.sessions[0]["start"] == moment
    assert sink.sessions[0]["end"] == moment
    assert sink.sessions[0]["identifiers"] == (_STALE, "", "")


@pytest.mark.unit
def test_signal_exit_codes_map_to_shell_convention() -> None:
    """Negative child codes become 128 plus the signal number."""
    assert ChildExited(exit_code=-15).host_exit_code == 143
    assert ChildExited(exit_code=2).host_exit_code == 2


@pytest.mark.unit
def test_invalid_models_message_points_to_model_listing() -> None:
    """The failure message names the bad IDs and the listing command."""
    message = invalid_models_message(_FAILED)

    assert f"'{_STALE}'" in message
    assert "bedlaunch models list" in message
