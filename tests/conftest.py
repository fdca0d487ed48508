"""
Shared fixtures for contentkey tests.
Creates isolated temporary directories with controlled test files.
"""
import logging
import pytest
import tempfile
from pathlib import Path
from typing import Dict


@pytest.fixture(autouse=True)
def reset_root_logger_level():
    """CLI --verbose raises the root logger level; restore it after each test."""
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def csv_scenario(temp_dir) -> Dict[str, Path]:
    """
    The canonical three-file scenario:
    - a.csv and b.csv are byte-identical
    - c.csv differs by one byte
    """
    files = {
        "a": temp_dir / "a.csv",
        "b": temp_dir / "b.csv",
        "c": temp_dir / "c.csv",
    }
    files["a"].write_bytes(b"x,y\n1,2\n")
    files["b"].write_bytes(b"x,y\n1,2\n")
    files["c"].write_bytes(b"x,y\n1,3\n")
    return files


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files for deduplication scenarios:
    - 2 identical files (duplicates)
    - 2 identical files with a different extension (duplicates by content)
    - 2 unique files (different content)
    - 1 empty file (included like any other file)
    - 1 file in a subdirectory duplicating the first pair
    """
    files = {}

    # Duplicate pair #1 (1KB of 'A')
    content_a = b"A" * 1024
    files["dup1_a"] = temp_dir / "dup1_a.txt"
    files["dup1_b"] = temp_dir / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    # Duplicate pair #2 (2KB of 'B'), extensions differ
    content_b = b"B" * 2048
    files["dup2_a"] = temp_dir / "dup2_a.dat"
    files["dup2_b"] = temp_dir / "dup2_b.bin"
    files["dup2_a"].write_bytes(content_b)
    files["dup2_b"].write_bytes(content_b)

    # Unique files
    files["unique1"] = temp_dir / "unique1.txt"
    files["unique1"].write_bytes(b"C" * 1500)
    files["unique2"] = temp_dir / "unique2.txt"
    files["unique2"].write_bytes(b"D" * 2500)

    # Empty file
    files["empty"] = temp_dir / "empty.txt"
    files["empty"].write_bytes(b"")

    # Subdirectory with duplicates
    subdir = temp_dir / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_a)  # Same as dup1_a/b

    return files
