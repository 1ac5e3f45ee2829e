"""
External command execution for the ABI export tooling.

All external invocations (``forge inspect`` today) go through :func:`run_tool`
with an explicit :class:`ToolSettings` value.  The settings are built once from
:class:`~abi_export.config.ExportConfig` and passed to every call site instead
of living in module-level state.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from abi_export.errors import ToolError

logger = structlog.get_logger(__name__)

STDERR_TRUNCATE_CHARS = 2000

#: ``short`` logs the command line, ``full`` also logs captured output.
VERBOSITY_LEVELS = ("short", "full")


@dataclass(frozen=True)
class ToolSettings:
    """Shared settings for every external command invocation."""

    verbosity: str = "short"
    env_overrides: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.verbosity not in VERBOSITY_LEVELS:
            raise ValueError(
                f"verbosity must be one of {VERBOSITY_LEVELS}, got {self.verbosity!r}."
            )

    def environment(self) -> dict[str, str]:
        """Return the child-process environment (current env plus overrides)."""
        env = dict(os.environ)
        env.update(self.env_overrides)
        return env


def _truncate(text: str) -> str:
    if len(text) > STDERR_TRUNCATE_CHARS:
        return text[:STDERR_TRUNCATE_CHARS] + "... (truncated)"
    return text


async def run_tool(
    settings: ToolSettings,
    *args: str,
    cwd: Path | str | None = None,
) -> str:
    """Run an external command and return its decoded stdout.

    Parameters
    ----------
    settings:
        Verbosity and environment overrides applied to this invocation.
    args:
        The command and its arguments.
    cwd:
        Working directory for the child process.

    Raises
    ------
    ToolError
        If the executable cannot be started or exits with a non-zero status.
    """
    command = [str(a) for a in args]
    logger.info("tool.run", command=" ".join(command), cwd=str(cwd) if cwd else None)

    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            cwd=cwd,
            env=settings.environment(),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise ToolError(command, None, str(exc)) from exc

    try:
        stdout, stderr = await process.communicate()
    finally:
        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.terminate()
            await process.wait()

    stdout_text = stdout.decode("utf-8", errors="replace")
    stderr_text = stderr.decode("utf-8", errors="replace")

    if settings.verbosity == "full":
        logger.info(
            "tool.output",
            command=" ".join(command),
            returncode=process.returncode,
            stdout=stdout_text,
            stderr=stderr_text,
        )

    if process.returncode != 0:
        raise ToolError(command, process.returncode, _truncate(stderr_text.strip()))

    return stdout_text
