"""Run the assistant while validating its models out-of-band.

The process starts first. A validation task and a wait task then race; an
invalid identifier reported before the process exits kills the process, and
a process that has already exited is never failed by a late validation.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import FIRST_COMPLETED, Future, wait
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import TypeVar

from bedlaunch.catalog.errors import CatalogError
from bedlaunch.catalog.validation import ValidationReport, Validator
from bedlaunch.launcher.process import ProcessHandle, ProcessRunner
from bedlaunch.usage.tracker import UsageSink

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

CONFIG_ERROR_EXIT_CODE = 78
_SIGNAL_EXIT_BASE = 128


class LaunchFailureKind(StrEnum):
    """Reasons the launcher itself failed a session."""

    INVALID_MODELS = "invalid_models"


@dataclass(frozen=True)
class ChildExited:
    """The assistant exited on its own."""

    exit_code: int

    @property
    def host_exit_code(self) -> int:
        """Exit code for the launcher; signals map to ``128 + signal``."""
        if self.exit_code < 0:
            return _SIGNAL_EXIT_BASE - self.exit_code
        return self.exit_code


@dataclass(frozen=True)
class LaunchFailed:
    """The launcher terminated the session because of its configuration."""

    kind: LaunchFailureKind
    message: str
    invalid: tuple[str, ...] = ()
    child_exit_code: int | None = None

    @property
    def host_exit_code(self) -> int:
        """Exit code for the launcher."""
        return CONFIG_ERROR_EXIT_CODE


LaunchOutcome = ChildExited | LaunchFailed


@dataclass(frozen=True)
class LaunchRequest:
    """Everything needed to start one assistant session."""

    profile_name: str
    executable: str
    args: tuple[str, ...]
    env: dict[str, str]
    identifiers: tuple[str, ...]


def _run_in_daemon(name: str, func: Callable[[], T]) -> Future[T]:
    """Run ``func`` on a daemon thread and expose its result as a future.

    A daemon thread is never joined at interpreter exit, so an abandoned
    catalog call cannot hold the launcher open after the assistant exits.

    Args:
        name: Thread name.
        func: Zero-argument callable to run.

    Returns:
        Future completed with the callable's result or exception.
    """
    future: Future[T] = Future()

    def _target() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(func())
        except BaseException as exc:  # noqa: BLE001 - delivered through the future
            future.set_exception(exc)

    threading.Thread(target=_target, name=name, daemon=True).start()
    return future


def invalid_models_message(report: ValidationReport) -> str:
    """Render the user-facing message for a failed validation."""
    lines = [
        "Invalid model configuration: "
        + ", ".join(f"'{identifier}'" for identifier in report.invalid)
        + " not available.",
    ]
    if report.available:
        lines.append("Available profiles:")
        lines.extend(f"  - {identifier}" for identifier in report.available)
    lines.append("Run 'bedlaunch models list' to see available models.")
    return "\n".join(lines)


class LaunchCoordinator:
    """Start the assistant, race validation against exit, record usage."""

    def __init__(
        self,
        *,
        runner: ProcessRunner,
        validator: Validator,
        usage_sink: UsageSink,
        validation_timeout_seconds: float = 15.0,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Store collaborators.

        Args:
            runner: Process start/wait/kill collaborator.
            validator: Zero-argument validation callable.
            usage_sink: Session recorder; its failures never fail a launch.
            validation_timeout_seconds: How long to wait for validation
                before continuing unvalidated.
            clock: Time source for session start/end stamps.
        """
        self._runner = runner
        self._validator = validator
        self._usage_sink = usage_sink
        self._validation_timeout_seconds = validation_timeout_seconds
        self._clock = clock or (lambda: datetime.now(UTC))

    def launch(self, request: LaunchRequest) -> LaunchOutcome:
        """Run one session to completion.

        Args:
            request: Launch request.

        Returns:
            Tagged outcome; ``host_exit_code`` gives the launcher's exit code.
        """
        started_at = self._clock()
        handle = self._runner.start(request.executable, request.args, request.env)
        try:
            exit_future = _run_in_daemon("bedlaunch-wait", lambda: self._runner.wait(handle))
            validation_future = _run_in_daemon("bedlaunch-validate", self._validator)
            outcome = self._race(handle, exit_future, validation_future)
        except Exception:
            self._runner.kill(handle)
            raise
        ended_at = self._clock()
        exit_code = (
            outcome.exit_code
            if isinstance(outcome, ChildExited)
            else (outcome.child_exit_code if outcome.child_exit_code is not None else -1)
        )
        self._record(request, started_at, ended_at, exit_code)
        return outcome

    def _race(
        self,
        handle: ProcessHandle,
        exit_future: Future[int],
        validation_future: Future[ValidationReport],
    ) -> LaunchOutcome:
        deadline = time.monotonic() + self._validation_timeout_seconds
        pending: set[Future[object]] = {exit_future, validation_future}  # type: ignore[arg-type]
        while True:
            timeout: float | None = None
            if validation_future in pending:
                timeout = deadline - time.monotonic()
                if timeout <= 0:
                    _LOGGER.warning(
                        "Model validation did not finish within %.0fs; continuing unvalidated.",
                        self._validation_timeout_seconds,
                    )
                    pending.discard(validation_future)  # type: ignore[arg-type]
                    continue
            try:
                done, _ = wait(pending, timeout=timeout, return_when=FIRST_COMPLETED)
            except KeyboardInterrupt:
                # Ctrl-C also reaches the child; keep waiting for it to exit.
                continue
            if exit_future in done:
                return ChildExited(exit_code=exit_future.result())
            if validation_future not in done:
                continue
            pending.discard(validation_future)  # type: ignore[arg-type]
            report = self._report(validation_future)
            if report is None or report.passed:
                continue
            if exit_future.done():
                return ChildExited(exit_code=exit_future.result())
            return self._terminate(handle, exit_future, report)

    def _report(self, validation_future: Future[ValidationReport]) -> ValidationReport | None:
        try:
            report = validation_future.result()
        except CatalogError as exc:
            _LOGGER.warning("Could not validate models: %s", exc)
            return None
        except Exception as exc:  # noqa: BLE001 - only an invalid identifier ends a session
            _LOGGER.warning("Model validation failed unexpectedly: %s", exc)
            return None
        if report.skipped_reason:
            _LOGGER.debug("Model validation skipped: %s", report.skipped_reason)
        return report

    def _terminate(
        self,
        handle: ProcessHandle,
        exit_future: Future[int],
        report: ValidationReport,
    ) -> LaunchFailed:
        _LOGGER.debug("Killing assistant process %s after failed validation", handle.pid)
        self._runner.kill(handle)
        child_exit_code = exit_future.result()
        return LaunchFailed(
            kind=LaunchFailureKind.INVALID_MODELS,
            message=invalid_models_message(report),
            invalid=report.invalid,
            child_exit_code=child_exit_code,
        )

    def _record(
        self,
        request: LaunchRequest,
        started_at: datetime,
        ended_at: datetime,
        exit_code: int,
    ) -> None:
        try:
            self._usage_sink.record_session(
                profile_name=request.profile_name,
                identifiers=request.identifiers,
                start=started_at,
                end=ended_at,
                exit_code=exit_code,
            )
        except Exception as exc:  # noqa: BLE001 - usage tracking never fails a launch
            _LOGGER.warning("Failed to record session usage: %s", exc)
