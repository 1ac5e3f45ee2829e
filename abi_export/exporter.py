"""
Concurrent ABI export via ``forge inspect``.

Each artifact gets its own asyncio task that runs the introspection tool,
formats the JSON and writes ``{output_dir}/{Name}.json``.  A task never lets
an exception escape: failures are logged with the artifact's qualified id and
recorded in that task's :class:`ExportResult`, so one bad contract cannot stop
the rest of the batch.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable

import structlog

from abi_export.formatting import format_json
from abi_export.outputs import expected_filename
from abi_export.scanner import ArtifactRef
from abi_export.tooling import ToolSettings, run_tool

logger = structlog.get_logger(__name__)

#: Async callable mapping a qualified id to the tool's raw ABI output.
Inspector = Callable[[str], Awaitable[str]]


@dataclass
class ExportResult:
    """Outcome of exporting a single artifact."""

    artifact: ArtifactRef
    output_path: Path | None = None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class ExportSummary:
    """All per-artifact results of one export batch, in input order."""

    results: list[ExportResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[ExportResult]:
        return [r for r in self.results if r.succeeded]

    @property
    def failed(self) -> list[ExportResult]:
        return [r for r in self.results if not r.succeeded]

    @property
    def total(self) -> int:
        return len(self.results)

    def describe(self) -> str:
        return f"{len(self.succeeded)} succeeded, {len(self.failed)} failed"


def write_atomic(path: Path, text: str) -> None:
    """Write *text* to *path* via a temp file in the same directory.

    A failed write leaves any existing file untouched.
    """
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise


def forge_inspector(
    settings: ToolSettings,
    forge_binary: str = "forge",
    cwd: Path | str | None = None,
) -> Inspector:
    """Build an inspector that runs ``forge inspect <id> abi --json``."""

    async def _inspect(qualified_id: str) -> str:
        return await run_tool(
            settings, forge_binary, "inspect", qualified_id, "abi", "--json", cwd=cwd
        )

    return _inspect


class AbiExporter:
    """Exports ABIs for discovered artifacts into an output directory.

    Parameters
    ----------
    output_dir:
        Directory receiving ``{Name}.json`` files.  Must already exist.
    inspector:
        Async callable returning raw ABI JSON for a qualified id.  Use
        :func:`forge_inspector` for the real tool.
    max_concurrency:
        Upper bound on simultaneous inspections.  ``None`` or ``0`` means
        one in-flight task per artifact.
    """

    def __init__(
        self,
        output_dir: Path | str,
        inspector: Inspector,
        max_concurrency: int | None = None,
    ) -> None:
        self._output_dir = Path(output_dir)
        self._inspector = inspector
        self._max_concurrency = max_concurrency or None

    async def export_one(self, artifact: ArtifactRef) -> Path:
        """Export a single artifact.  Errors propagate to the caller."""
        raw = await self._inspector(artifact.qualified_id)
        formatted = format_json(raw)

        output_path = self._output_dir / expected_filename(artifact)
        await asyncio.to_thread(write_atomic, output_path, formatted)
        logger.info("exporter.generated", artifact=artifact.qualified_id, path=str(output_path))
        return output_path

    async def _export_isolated(
        self,
        artifact: ArtifactRef,
        semaphore: asyncio.Semaphore | None,
    ) -> ExportResult:
        try:
            if semaphore is None:
                output_path = await self.export_one(artifact)
            else:
                async with semaphore:
                    output_path = await self.export_one(artifact)
        except Exception as exc:
            logger.error(
                "exporter.export_failed",
                artifact=artifact.qualified_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return ExportResult(artifact=artifact, error=exc)
        return ExportResult(artifact=artifact, output_path=output_path)

    async def export_all(self, artifacts: list[ArtifactRef]) -> ExportSummary:
        """Export every artifact concurrently and wait for all of them."""
        semaphore = (
            asyncio.Semaphore(self._max_concurrency) if self._max_concurrency else None
        )
        logger.info(
            "exporter.batch_start",
            count=len(artifacts),
            max_concurrency=self._max_concurrency,
        )

        tasks = [
            asyncio.create_task(self._export_isolated(artifact, semaphore))
            for artifact in artifacts
        ]
        results = await asyncio.gather(*tasks) if tasks else []

        summary = ExportSummary(results=list(results))
        logger.info(
            "exporter.batch_complete",
            succeeded=len(summary.succeeded),
            failed=len(summary.failed),
        )
        return summary
