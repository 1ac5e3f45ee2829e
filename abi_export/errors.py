"""
Exception types raised by the ABI export tooling.
"""

from __future__ import annotations


class AbiExportError(Exception):
    """Base class for ABI export failures."""


class ToolError(AbiExportError, RuntimeError):
    """An external command could not be run or exited non-zero.

    Parameters
    ----------
    command:
        The argv that was executed.
    returncode:
        Process exit status, or ``None`` when the process never started.
    stderr:
        Captured (truncated) standard error.
    """

    def __init__(
        self,
        command: list[str],
        returncode: int | None,
        stderr: str = "",
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr

        if returncode is None:
            message = f"Command not runnable: {' '.join(command)}"
        else:
            message = f"Command failed with exit code {returncode}: {' '.join(command)}"
        if stderr:
            message = f"{message}\nstderr: {stderr}"
        super().__init__(message)


class FormatError(AbiExportError, ValueError):
    """Tool output could not be parsed as JSON."""
