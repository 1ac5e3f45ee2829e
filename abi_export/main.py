"""
ABI export command -- scan, prune and regenerate contract ABIs.

Discovers contracts and interfaces under the source root, removes ``.json``
files in the output directory that no longer match a discovered artifact,
then runs ``forge inspect <path:Name> abi --json`` for every artifact and
writes the formatted result to ``{output_dir}/{Name}.json``.

Usage::

    abi-export generate
    python -m abi_export generate --output-dir abis --max-concurrency 4
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass, field
from typing import Any

import structlog
from pydantic import ValidationError

from abi_export.config import ExportConfig
from abi_export.exporter import AbiExporter, ExportSummary, forge_inspector
from abi_export.outputs import derive_expected_outputs, prune_orphans
from abi_export.scanner import ArtifactRef, scan_contracts

logger = structlog.get_logger("abi_export.main")

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(level: str = "info") -> None:
    """Configure structlog for console output at *level*."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_LOG_LEVELS[level]),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Generate
# ---------------------------------------------------------------------------


@dataclass
class GenerateReport:
    """What a ``generate`` run found, pruned and exported."""

    artifacts: list[ArtifactRef] = field(default_factory=list)
    pruned: list[str] = field(default_factory=list)
    export: ExportSummary = field(default_factory=ExportSummary)

    @property
    def has_failures(self) -> bool:
        return bool(self.export.failed)


async def generate(config: ExportConfig, exporter: AbiExporter | None = None) -> GenerateReport:
    """Run the full scan -> prune -> export pipeline.

    Scan and filesystem errors propagate; per-artifact export errors are
    collected in the returned report.
    """
    output_dir = config.abi_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    logger.info("generate.scan.start", source_root=str(config.source_dir))
    artifacts = scan_contracts(
        config.source_dir,
        project_root=config.project_root,
        extension=config.source_extension,
    )
    logger.info("generate.scan.done", found=len(artifacts))
    for artifact in artifacts:
        logger.info("generate.artifact_found", artifact=artifact.qualified_id)

    expected = derive_expected_outputs(artifacts)
    pruned = prune_orphans(output_dir, expected)

    if exporter is None:
        exporter = AbiExporter(
            output_dir=output_dir,
            inspector=forge_inspector(
                config.tool_settings(),
                forge_binary=config.forge_binary,
                cwd=config.project_root,
            ),
            max_concurrency=config.max_concurrency,
        )
    summary = await exporter.export_all(artifacts)

    for result in summary.failed:
        logger.error(
            "generate.export_failed",
            artifact=result.artifact.qualified_id,
            cause=str(result.error),
        )

    logger.info(
        "generate.complete",
        found=len(artifacts),
        pruned=len(pruned),
        succeeded=len(summary.succeeded),
        failed=len(summary.failed),
    )
    return GenerateReport(artifacts=artifacts, pruned=pruned, export=summary)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="abi-export",
        description="Export contract ABIs from a Foundry project into per-contract JSON files.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=["generate"],
        default="generate",
        help="Operation to run (default: generate)",
    )
    parser.add_argument("--project-root", default=None, help="Foundry project root")
    parser.add_argument("--source-root", default=None, help="Contract source directory")
    parser.add_argument("--output-dir", default=None, help="ABI output directory")
    parser.add_argument("--forge", dest="forge_binary", default=None, help="forge executable")
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Maximum concurrent forge invocations (0 = unbounded)",
    )
    parser.add_argument(
        "--fail-on-export-error",
        action="store_true",
        default=None,
        help="Exit non-zero if any artifact fails to export",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging and full tool output",
    )
    return parser.parse_args(argv)


def _config_overrides(parsed: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name in (
        "project_root",
        "source_root",
        "output_dir",
        "forge_binary",
        "max_concurrency",
        "fail_on_export_error",
    ):
        value = getattr(parsed, name)
        if value is not None:
            overrides[name] = value
    if parsed.verbose:
        overrides["log_level"] = "debug"
        overrides["tool_verbosity"] = "full"
    return overrides


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and config, run ``generate``, and return the exit code.

    Exit codes: ``1`` when configuration or scanning fails, or when exports
    fail and ``fail_on_export_error`` is set; ``0`` otherwise.
    """
    parsed = parse_args(argv)

    try:
        config = ExportConfig(**_config_overrides(parsed))
    except ValidationError as exc:
        configure_logging()
        logger.error("abi_export.invalid_config", error=str(exc))
        return 1

    configure_logging(config.log_level)

    loop = asyncio.new_event_loop()
    try:
        report = loop.run_until_complete(generate(config))
    except (OSError, ValueError):
        logger.exception("abi_export.generate_failed")
        return 1
    except KeyboardInterrupt:
        logger.info("abi_export.keyboard_interrupt")
        return 1
    finally:
        loop.close()

    if report.has_failures:
        logger.warning("abi_export.partial_failure", summary=report.export.describe())
        if config.fail_on_export_error:
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
