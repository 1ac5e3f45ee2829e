"""
Expected output naming and orphan pruning for the ABI output directory.

The output directory should hold exactly one ``{Name}.json`` per artifact the
scanner currently discovers.  Anything else with a ``.json`` suffix is an
orphan left behind by a renamed or deleted contract.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Iterable

import structlog

from abi_export.scanner import ArtifactRef

logger = structlog.get_logger(__name__)

OUTPUT_SUFFIX = ".json"


def expected_filename(identifier: ArtifactRef | str) -> str:
    """Return the output filename for an artifact or identifier string.

    An :class:`ArtifactRef` is keyed by its source file name.  A string is
    either a qualified id (``path:Name``, keyed by ``Name``) or a bare source
    path (keyed by the file's base name).
    """
    if isinstance(identifier, ArtifactRef):
        return f"{identifier.name}{OUTPUT_SUFFIX}"

    _, sep, name = identifier.rpartition(":")
    if not sep or not name or "/" in name or "\\" in name:
        name = PurePosixPath(identifier.replace("\\", "/").rstrip(":")).stem
    return f"{name}{OUTPUT_SUFFIX}"


def derive_expected_outputs(items: Iterable[ArtifactRef | str]) -> set[str]:
    """Return the set of output filenames the current artifacts should produce."""
    return {expected_filename(item) for item in items}


def prune_orphans(output_dir: Path | str, expected: set[str]) -> list[str]:
    """Delete ``.json`` files in *output_dir* that are not in *expected*.

    Only direct children are considered.  A missing directory means nothing to
    prune.  Other listing or deletion errors propagate.

    Returns
    -------
    list[str]
        Names of the deleted files, sorted.
    """
    output_dir = Path(output_dir)

    try:
        entries = sorted(output_dir.iterdir())
    except FileNotFoundError:
        logger.debug("pruner.output_dir_missing", output_dir=str(output_dir))
        return []

    removed: list[str] = []
    for entry in entries:
        if entry.suffix != OUTPUT_SUFFIX or not entry.is_file():
            continue
        if entry.name in expected:
            continue

        entry.unlink()
        removed.append(entry.name)
        logger.info("pruner.orphan_removed", file=entry.name)

    return removed
