#!/usr/bin/env python3
"""Regenerate contract ABIs into abis/ via ``forge inspect``.

Run from the repo root::

    chmod +x scripts/export_abis.py
    scripts/export_abis.py
"""

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent

if __name__ == "__main__":
    sys.path.insert(0, str(REPO_ROOT))
    from abi_export.main import main

    sys.exit(main(["generate", "--project-root", str(REPO_ROOT), *sys.argv[1:]]))
