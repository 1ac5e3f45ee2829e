"""
ABI export configuration loaded from environment variables.

Uses ``pydantic-settings`` for validated, typed configuration.  Every field can
be set through an ``ABI_EXPORT_``-prefixed environment variable, a ``.env``
file, or a command-line flag (passed in as init kwargs).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

from abi_export.tooling import ToolSettings


class ExportConfig(BaseSettings):
    """Configuration for the ``generate`` command."""

    model_config = {
        "env_prefix": "ABI_EXPORT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # ---- Paths ----
    project_root: Path = Field(
        default=Path("."),
        description="Foundry project root; forge runs here and source paths are relative to it.",
    )
    source_root: Path = Field(
        default=Path("src"),
        description="Contract source directory, relative to project_root unless absolute.",
    )
    output_dir: Path = Field(
        default=Path("abis"),
        description="Directory receiving one {Name}.json per artifact.",
    )
    source_extension: str = Field(
        default=".sol",
        description="File suffix identifying contract sources.",
    )

    # ---- External tools ----
    forge_binary: str = Field(
        default="forge",
        description="Foundry forge executable used for `forge inspect`.",
    )
    tool_verbosity: Literal["short", "full"] = Field(
        default="short",
        description="'short' logs each command, 'full' also logs its output.",
    )
    tool_env: dict[str, str] = Field(
        default_factory=dict,
        description="Environment overrides for every external command (JSON object).",
    )

    # ---- Export ----
    max_concurrency: int = Field(
        default_factory=lambda: os.cpu_count() or 1,
        ge=0,
        description="Maximum concurrent `forge inspect` calls; 0 means unbounded.",
    )
    fail_on_export_error: bool = Field(
        default=False,
        description="Exit non-zero when any single artifact fails to export.",
    )

    # ---- Logging ----
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Minimum log level.",
    )

    def resolve(self, path: Path) -> Path:
        """Resolve *path* against ``project_root`` when it is relative."""
        return path if path.is_absolute() else self.project_root / path

    @property
    def source_dir(self) -> Path:
        return self.resolve(self.source_root)

    @property
    def abi_dir(self) -> Path:
        return self.resolve(self.output_dir)

    def tool_settings(self) -> ToolSettings:
        """Build the shared settings passed to every external invocation."""
        return ToolSettings(verbosity=self.tool_verbosity, env_overrides=dict(self.tool_env))
