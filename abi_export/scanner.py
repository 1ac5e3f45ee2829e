"""
Contract source discovery for ABI export.

Walks a Solidity source tree and classifies each file with a deliberately
lightweight heuristic (substring and regex search, not a parser):

- a file mentioning ``abstract contract`` or ``library `` anywhere (comments
  and string literals included) is skipped as a whole;
- otherwise the first ``interface <Name>`` or ``contract <Name>`` match names
  the artifact, with the interface match taking precedence.

Known limitation: keywords inside comments or strings still count, so a
contract whose NatSpec says "this library ..." is excluded, and a comment such
as "// contract owner" can produce a bogus identifier.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_SOURCE_EXTENSION = ".sol"

#: Substrings that exclude a whole file from export.
EXCLUSION_MARKERS = ("abstract contract", "library ")

_INTERFACE_RE = re.compile(r"interface\s+(\w+)")
_CONTRACT_RE = re.compile(r"contract\s+(\w+)")


@dataclass(frozen=True)
class ArtifactRef:
    """One exportable contract or interface."""

    source_path: str
    name: str
    declared_name: str

    @property
    def qualified_id(self) -> str:
        """``path:Name`` key understood by ``forge inspect``."""
        return f"{self.source_path}:{self.declared_name}"


def iter_source_files(root: Path, extension: str = DEFAULT_SOURCE_EXTENSION) -> Iterator[Path]:
    """Yield files under *root* with *extension*, depth-first in sorted order.

    Symlinks are skipped.  Directory listing errors propagate to the caller.
    """
    for entry in sorted(root.iterdir()):
        if entry.is_symlink():
            continue
        if entry.is_dir():
            yield from iter_source_files(entry, extension)
        elif entry.is_file() and entry.name.endswith(extension):
            yield entry


def is_excluded(content: str) -> bool:
    """Return True if *content* declares an abstract contract or a library."""
    return any(marker in content for marker in EXCLUSION_MARKERS)


def find_declaration(content: str) -> str | None:
    """Return the declared interface or contract name, interface first."""
    interface_match = _INTERFACE_RE.search(content)
    contract_match = _CONTRACT_RE.search(content)

    if interface_match:
        return interface_match.group(1)
    if contract_match:
        return contract_match.group(1)
    return None


def scan_contracts(
    source_root: Path | str,
    project_root: Path | str | None = None,
    extension: str = DEFAULT_SOURCE_EXTENSION,
) -> list[ArtifactRef]:
    """Discover exportable artifacts under *source_root*.

    Parameters
    ----------
    source_root:
        Directory holding the contract sources (e.g. ``src``).
    project_root:
        Directory that ``source_path`` values are relative to.  Defaults to
        the parent of *source_root*, so scanning ``./src`` yields
        ``src/...`` paths.
    extension:
        File suffix identifying contract sources.

    Returns
    -------
    list[ArtifactRef]
        At most one entry per source file, in traversal order.

    Raises
    ------
    OSError
        If the tree cannot be listed or a file cannot be read.
    """
    source_root = Path(source_root).resolve()
    base = Path(project_root).resolve() if project_root is not None else source_root.parent

    if not source_root.is_dir():
        raise FileNotFoundError(f"Source root does not exist: {source_root}")
    if not source_root.is_relative_to(base):
        raise ValueError(f"Source root {source_root} is not inside project root {base}.")

    artifacts: list[ArtifactRef] = []
    for path in iter_source_files(source_root, extension):
        content = path.read_text(encoding="utf-8")

        if is_excluded(content):
            logger.debug("scanner.excluded", path=str(path))
            continue

        declared = find_declaration(content)
        if declared is None:
            logger.debug("scanner.no_declaration", path=str(path))
            continue

        artifact = ArtifactRef(
            source_path=path.relative_to(base).as_posix(),
            name=path.name[: -len(extension)],
            declared_name=declared,
        )
        artifacts.append(artifact)

    logger.info("scanner.scan_complete", root=str(source_root), count=len(artifacts))
    return artifacts
