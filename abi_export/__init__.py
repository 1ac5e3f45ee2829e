"""
ABI export tooling re-exported for convenience.
"""

from abi_export.config import ExportConfig
from abi_export.errors import AbiExportError, FormatError, ToolError
from abi_export.exporter import AbiExporter, ExportResult, ExportSummary, forge_inspector
from abi_export.formatting import format_json
from abi_export.outputs import derive_expected_outputs, expected_filename, prune_orphans
from abi_export.scanner import ArtifactRef, scan_contracts
from abi_export.tooling import ToolSettings, run_tool

__all__ = [
    "AbiExportError",
    "AbiExporter",
    "ArtifactRef",
    "ExportConfig",
    "ExportResult",
    "ExportSummary",
    "FormatError",
    "ToolError",
    "ToolSettings",
    "derive_expected_outputs",
    "expected_filename",
    "forge_inspector",
    "format_json",
    "prune_orphans",
    "run_tool",
    "scan_contracts",
]
