"""
Pytest configuration and shared fixtures.
"""

import matplotlib
matplotlib.use("Agg")

import pytest
from pathlib import Path
from typing import List


@pytest.fixture
def number_words() -> List[str]:
    """English number words one..twenty, in order."""
    return [
        "one", "two", "three", "four", "five",
        "six", "seven", "eight", "nine", "ten",
        "eleven", "twelve", "thirteen", "fourteen", "fifteen",
        "sixteen", "seventeen", "eighteen", "nineteen", "twenty",
    ]


@pytest.fixture
def source_paths() -> List[str]:
    """A small file listing with paths, dotted names and camelCase."""
    return [
        "src/app/config.py",
        "app/config",
        "docs/appendix.md",
        "lib/rb.rs",
        "arbiter.py",
        "tests/test_app_config.py",
        "src/AppConfig.java",
        "README.md",
    ]


@pytest.fixture
def candidates_file(tmp_path: Path, source_paths) -> Path:
    path = tmp_path / "candidates.txt"
    path.write_text("\n".join(source_paths) + "\n", encoding="utf-8")
    return path
