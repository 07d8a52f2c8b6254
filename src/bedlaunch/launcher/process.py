"""Single place for assistant subprocess invocation.

Uses shell=False, list args, and inherited stdio so the assistant owns the
terminal for the whole session.
"""

from __future__ import annotations

import shutil
import subprocess  # nosec B404 - used with shell=False, list args
from collections.abc import Mapping, Sequence
from typing import Protocol


class ExecutableNotFoundError(RuntimeError):
    """Raised when the assistant binary cannot be located on PATH."""


class ProcessHandle(Protocol):
    """Handle to a started child process."""

    pid: int


class ProcessRunner(Protocol):
    """Protocol for starting, waiting on, and killing a child process."""

    def start(
        self, executable: str, args: Sequence[str], env: Mapping[str, str]
    ) -> ProcessHandle:
        """Start the process without waiting for it."""

    def wait(self, handle: ProcessHandle) -> int:
        """Block until the process exits and return its exit code."""

    def kill(self, handle: ProcessHandle) -> None:
        """Forcibly terminate the process."""


def find_executable(name: str, *, path: str | None = None) -> str:
    """Resolve ``name`` on PATH.

    Raises:
        ExecutableNotFoundError: If the binary is not found.
    """
    resolved = shutil.which(name, path=path)
    if resolved is None:
        raise ExecutableNotFoundError(f"{name} binary not found in PATH")
    return resolved


class SubprocessRunner:
    """ProcessRunner backed by :class:`subprocess.Popen`."""

    def start(
        self, executable: str, args: Sequence[str], env: Mapping[str, str]
    ) -> subprocess.Popen[bytes]:
        """Start ``executable`` with inherited stdio.

        Args:
            executable: Resolved binary path.
            args: Arguments after the program name.
            env: Full child environment.

        Returns:
            Popen handle.
        """
        return subprocess.Popen(  # noqa: S603  # nosec B603 - shell=False, list args
            [executable, *args],
            env=dict(env),
            shell=False,
        )

    def wait(self, handle: subprocess.Popen[bytes]) -> int:  # type: ignore[override]
        """Wait for exit and return the code."""
        return handle.wait()

    def kill(self, handle: subprocess.Popen[bytes]) -> None:  # type: ignore[override]
        """Kill the process unless it already exited."""
        if handle.poll() is None:
            handle.kill()
