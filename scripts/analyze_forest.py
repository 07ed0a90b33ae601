#!/usr/bin/env python3
"""Analyze a forest height map from the repository checkout.

Usage:
    python scripts/analyze_forest.py tests/fixtures/sample.txt
    python scripts/analyze_forest.py tests/fixtures/sample.txt --part 2

Equivalent to the installed ``forest-sight`` command.
"""

import sys
from pathlib import Path

# Add repo root and src/ to path
ROOT_DIR = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT_DIR / "src"))
sys.path.insert(0, str(ROOT_DIR))

from application.cli import main  # noqa: E402

if __name__ == "__main__":
    raise SystemExit(main())
