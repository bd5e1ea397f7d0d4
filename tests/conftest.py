"""Pytest configuration for the ducktype test suite."""

import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).parent
ROOT_DIR = TESTS_DIR.parent

# Repo root for the ducktype package, tests dir for the shapes fixture module
sys.path.insert(0, str(ROOT_DIR))
sys.path.insert(0, str(TESTS_DIR))

from ducktype import Checker, DescriptorCache, Reflector  # noqa: E402


def parse_tests_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse a .tests file into (name, input, expected) tuples.

    Format:

        === test name
        input lines
        ---
        expected lines
        ---
    """
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            test_input = "\n".join(input_lines)
            expected = "\n".join(expected_lines).strip()
            result.append((test_name, test_input, expected))
        else:
            i += 1
    return result


def discover_tests(directory: Path) -> list[tuple[str, str, str]]:
    """Find all cases under a directory, returns (test_id, input, expected)."""
    results = []
    for test_file in sorted(directory.glob("*.tests")):
        for name, test_input, expected in parse_tests_file(test_file):
            test_id = f"{test_file.stem}/{name}"
            results.append((test_id, test_input, expected))
    return results


@pytest.fixture
def checker() -> Checker:
    """A checker with its own registry and cache, isolated from other tests."""
    return Checker(reflector=Reflector(), cache=DescriptorCache())
