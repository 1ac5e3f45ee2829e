"""Shared fixtures for ABI export tests."""

import os
import stat
import sys
from pathlib import Path
from typing import Callable, Dict

import pytest


FAKE_FORGE = """#!{python}
import json
import sys

qualified_id = sys.argv[2]
if qualified_id.endswith(":Bad"):
    sys.stderr.write("Error: compiler run failed\\n")
    sys.exit(1)
print(json.dumps([{{"type": "function", "name": "ping", "inputs": [], "outputs": [], "stateMutability": "view"}}]))
"""


@pytest.fixture
def write_tree(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Return a helper that writes {relative path: content} under tmp_path."""

    def _write(files: Dict[str, str]) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _write


@pytest.fixture
def fake_forge(tmp_path: Path) -> Path:
    """An executable that mimics `forge inspect <id> abi --json`; ids ending in :Bad fail."""
    path = tmp_path / "bin" / "forge"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(FAKE_FORGE.format(python=sys.executable), encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch):
    """Keep stray ABI_EXPORT_* variables and .env files out of the tests."""
    for key in list(os.environ):
        if key.startswith("ABI_EXPORT_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
