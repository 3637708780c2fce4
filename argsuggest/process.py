"""Subprocess helpers for script generators.

ManagedProcess:
    Owns one shell subprocess with a proper shutdown sequence
    (SIGTERM -> wait -> SIGKILL -> reap).

run_command:
    Runs a command to completion with a timeout and returns its output.
"""

__all__ = ["CommandOutput", "ManagedProcess", "run_command"]

import asyncio
import contextlib
import os
import shlex
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .constants import GRACEFUL_KILL_TIMEOUT
from .models import ScriptError, ScriptTimeout


@dataclass
class CommandOutput:
    """Result of a finished command."""

    stdout: str
    stderr: str
    returncode: int


class ManagedProcess:
    """Manages a subprocess with proper lifecycle handling.

    Usage:
        proc = ManagedProcess()
        await proc.start("ls -1", stdout=asyncio.subprocess.PIPE)
        out, err = await proc.communicate(timeout=5)
        await proc.stop()
    """

    def __init__(self, graceful_timeout: float = GRACEFUL_KILL_TIMEOUT) -> None:
        """Initialize.

        Args:
            graceful_timeout: Seconds to wait after SIGTERM before SIGKILL
        """
        self._proc: asyncio.subprocess.Process | None = None
        self._graceful_timeout = graceful_timeout

    @property
    def pid(self) -> int | None:
        """Return PID if process exists, else None."""
        return self._proc.pid if self._proc else None

    @property
    def returncode(self) -> int | None:
        """Return exit code if process exited, else None."""
        return self._proc.returncode if self._proc else None

    @property
    def is_alive(self) -> bool:
        """Check if process is currently running."""
        return self._proc is not None and self._proc.returncode is None

    async def start(self, command: str, **subprocess_kwargs: Any) -> None:  # noqa: ANN401
        """Start the process. Stops existing process first if running.

        Args:
            command: Shell command to run
            **subprocess_kwargs: Passed to create_subprocess_shell (e.g., stdout=PIPE)
        """
        if self.is_alive:
            await self.stop()
        self._proc = await asyncio.create_subprocess_shell(command, **subprocess_kwargs)

    async def communicate(self, timeout: float | None = None) -> tuple[bytes, bytes]:
        """Wait for the process to exit and return its (stdout, stderr).

        Raises:
            RuntimeError: If no process is running
            TimeoutError: If the process did not exit within `timeout` seconds
        """
        if self._proc is None:
            msg = "No process running"
            raise RuntimeError(msg)
        stdout, stderr = await asyncio.wait_for(self._proc.communicate(), timeout=timeout)
        return stdout or b"", stderr or b""

    async def stop(self) -> int | None:
        """Stop the process gracefully.

        Returns:
            The process return code, or None if not running
        """
        if self._proc is None:
            return None

        if self._proc.returncode is not None:
            return self._proc.returncode

        with contextlib.suppress(ProcessLookupError):
            self._proc.terminate()

        try:
            await asyncio.wait_for(self._proc.wait(), timeout=self._graceful_timeout)
        except TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                self._proc.kill()
            await self._proc.wait()

        return self._proc.returncode


def _as_shell_command(command: str | Sequence[str]) -> str:
    if isinstance(command, str):
        return command
    return shlex.join(command)


async def run_command(
    command: str | Sequence[str],
    timeout_ms: int,
    cwd: str | None = None,
    env: Mapping[str, str] | None = None,
) -> CommandOutput:
    """Run `command` in a shell and collect its output.

    Args:
        command: shell string, or an argv sequence (quoted for the shell)
        timeout_ms: milliseconds before the process is stopped
        cwd: working directory, the current one if empty
        env: extra environment variables

    Raises:
        ScriptTimeout: the command did not finish in time
        ScriptError: the command exited with a non-zero status
    """
    shell_command = _as_shell_command(command)
    kwargs: dict[str, Any] = {
        "stdout": asyncio.subprocess.PIPE,
        "stderr": asyncio.subprocess.PIPE,
        "stdin": asyncio.subprocess.DEVNULL,
    }
    if cwd:
        kwargs["cwd"] = cwd
    if env:
        kwargs["env"] = {**os.environ, **env}

    proc = ManagedProcess()
    await proc.start(shell_command, **kwargs)
    try:
        stdout, stderr = await proc.communicate(timeout=timeout_ms / 1000)
    except TimeoutError as e:
        await proc.stop()
        raise ScriptTimeout(shell_command, timeout_ms) from e
    finally:
        if proc.is_alive:
            await proc.stop()

    output = CommandOutput(
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
        returncode=proc.returncode or 0,
    )
    if output.returncode != 0:
        raise ScriptError(shell_command, output.returncode, output.stderr)
    return output
