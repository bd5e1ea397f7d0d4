"""CLI tests for the ducktype entry point.

Test cases live in cli/*.tests files. Format:

    === test name
    args: shapes.PDFDocument shapes.Renderable
    ---
    exit: 0
    stdout-contains: ok
    stdout-line: first line of stdout
    stdout-line: second line of stdout
    stdout-empty: true
    stderr: ducktype: exact message
    stderr-contains: substring
    stderr-empty: true
    ---

`stdout-line` directives, taken together, must equal stdout line for line.
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest

from conftest import ROOT_DIR, TESTS_DIR, discover_tests
from ducktype.cli import main

CLI_DIR = Path(__file__).parent / "cli"


def _parse_spec(input_text: str, expected_text: str) -> dict:
    """Parse input + expected sections into a test spec dict."""
    spec: dict = {"args": [], "assertions": [], "stdout_lines": []}
    for line in input_text.split("\n"):
        if line.startswith("args:"):
            args_str = line[5:].strip()
            spec["args"] = args_str.split() if args_str else []
    for line in expected_text.split("\n"):
        line = line.strip()
        if not line:
            continue
        if line.startswith("exit:"):
            spec["assertions"].append(("exit", int(line[5:].strip())))
        elif line.startswith("stdout-line:"):
            spec["stdout_lines"].append(line[12:].strip())
        elif line.startswith("stdout-contains:"):
            spec["assertions"].append(("stdout-contains", line[16:].strip()))
        elif line.startswith("stdout-empty:"):
            spec["assertions"].append(("stdout-empty", None))
        elif line.startswith("stderr-contains:"):
            spec["assertions"].append(("stderr-contains", line[16:].strip()))
        elif line.startswith("stderr-empty:"):
            spec["assertions"].append(("stderr-empty", None))
        elif line.startswith("stderr:"):
            spec["assertions"].append(("stderr", line[7:].strip()))
    return spec


def run_cli(args: list[str]) -> subprocess.CompletedProcess[bytes]:
    """Run `python -m ducktype` with the test shapes importable."""
    env = dict(os.environ)
    paths = [str(ROOT_DIR), str(TESTS_DIR)]
    if env.get("PYTHONPATH"):
        paths.append(env["PYTHONPATH"])
    env["PYTHONPATH"] = os.pathsep.join(paths)
    return subprocess.run(
        [sys.executable, "-m", "ducktype", *args],
        capture_output=True,
        cwd=TESTS_DIR,
        env=env,
    )


def check_assertions(result: subprocess.CompletedProcess[bytes], spec: dict) -> None:
    """Check all assertions against a CLI result."""
    stdout = result.stdout.decode(errors="replace")
    stderr = result.stderr.decode(errors="replace")
    for kind, value in spec["assertions"]:
        if kind == "exit":
            assert result.returncode == value, (
                f"expected exit {value}, got {result.returncode}\nstderr: {stderr}"
            )
        elif kind == "stdout-contains":
            assert value in stdout, f"expected stdout to contain {value!r}, got {stdout!r}"
        elif kind == "stdout-empty":
            assert stdout == "", f"expected empty stdout, got {stdout[:200]!r}"
        elif kind == "stderr":
            actual = stderr.rstrip("\n")
            assert actual == value, f"expected stderr {value!r}, got {actual!r}"
        elif kind == "stderr-contains":
            assert value in stderr, f"expected stderr to contain {value!r}, got {stderr!r}"
        elif kind == "stderr-empty":
            assert stderr == "", f"expected empty stderr, got {stderr!r}"
    if spec["stdout_lines"]:
        assert stdout.splitlines() == spec["stdout_lines"]


def pytest_generate_tests(metafunc):
    """Parametrize test_cli over all .tests files."""
    if "cli_spec" in metafunc.fixturenames:
        params = [
            pytest.param(_parse_spec(test_input, expected), id=test_id)
            for test_id, test_input, expected in discover_tests(CLI_DIR)
        ]
        metafunc.parametrize("cli_spec", params)


def test_cli(cli_spec: dict) -> None:
    """Run a single CLI test case from a .tests file."""
    result = run_cli(cli_spec["args"])
    check_assertions(result, cli_spec)


# --- In-process ---


def test_main_conforms(capsys):
    assert main(["shapes.Command", "shapes.ExtendedCommand"]) == 0
    out = capsys.readouterr().out
    assert out == "ok: shapes.Command conforms to shapes.ExtendedCommand\n"


def test_main_reports_violations(capsys):
    assert main(["shapes.IntProcessor", "shapes.UnionProcessor"]) == 1
    out = capsys.readouterr().out
    assert out == (
        "ParameterTypeMismatch process: parameter 'data' of method 'process' "
        "has type mismatch: expected int | str, got int\n"
    )


def test_main_strict_any(capsys):
    assert main(["shapes.AnyProcessor", "shapes.Processor"]) == 0
    assert main(["--strict-any", "shapes.AnyProcessor", "shapes.Processor"]) == 1
    out = capsys.readouterr().out
    assert "ParameterTypeMismatch process" in out


def test_main_usage_errors(capsys):
    assert main([]) == 2
    assert "expected CANDIDATE and CONTRACT" in capsys.readouterr().err
    assert main(["shapes.PDFDocument", "shapes.not_a_class"]) == 2
    assert "not a class" in capsys.readouterr().err


def test_main_strict_returns(capsys):
    assert main(["shapes.WidenedLoader", "shapes.Loader"]) == 0
    assert main(["--strict-returns", "shapes.WidenedLoader", "shapes.Loader"]) == 1
    assert "ReturnTypeMismatch load" in capsys.readouterr().out


def test_main_imports_from_the_working_directory(tmp_path, monkeypatch, capsys):
    (tmp_path / "cwd_shapes.py").write_text(
        "class Greeter:\n"
        "    def greet(self) -> str:\n"
        "        return ''\n"
        "\n"
        "class Polite:\n"
        "    def greet(self) -> str:\n"
        "        return 'hello'\n"
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(sys, "path", [p for p in sys.path if p not in ("", str(tmp_path))])
    monkeypatch.delitem(sys.modules, "cwd_shapes", raising=False)
    assert main(["cwd_shapes.Polite", "cwd_shapes.Greeter"]) == 0
    assert capsys.readouterr().out == "ok: cwd_shapes.Polite conforms to cwd_shapes.Greeter\n"
    assert sys.path[0] == str(tmp_path)
