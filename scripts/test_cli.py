# scripts/test_cli.py
"""Command line tests: exit codes and output."""

import io
import json
import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from rich.console import Console

from taskgate.cli import EXIT_BLOCKED, EXIT_INVALID, EXIT_OK, main, parse_context
from taskgate.errors import InvalidArgumentError


def run_cli(*argv):
    buffer = io.StringIO()
    code = main(list(argv), console=Console(file=buffer, width=200))
    return code, buffer.getvalue()


def test_route_json():
    code, output = run_cli("route", "design", "a responsive ui component", "--json")
    assert code == EXIT_OK
    data = json.loads(output)
    assert data["type"] == "single-domain"
    assert data["domains"] == ["experience"]
    assert data["blocked"] is False


def test_route_table():
    code, output = run_cli("route", "create", "database", "schema")
    assert code == EXIT_OK
    assert "domain-with-helpers" in output
    assert "pre-execution" in output


def test_blocked_route_exits_with_one():
    code, output = run_cli("route", "run", "rm -rf /", "--json")
    assert code == EXIT_BLOCKED
    assert json.loads(output)["blocked_by"] == "pre-execution"


def test_invalid_context_exits_with_two():
    code, output = run_cli("route", "design", "--context", "[1, 2]")
    assert code == EXIT_INVALID
    assert "JSON object" in output


def test_context_reaches_the_hooks():
    code, output = run_cli(
        "route", "design", "--context", '{"permissions": ["admin"]}', "--session-id", "abc", "--json",
    )
    assert code == EXIT_BLOCKED


def test_status_lists_builtin_hooks():
    code, output = run_cli("status")
    assert code == EXIT_OK
    for name in ("pre-execution", "post-execution", "completion", "consciousness-check", "resource-monitor"):
        assert name in output


def test_config_summary():
    code, output = run_cli("config")
    assert code == EXIT_OK
    assert "Hook timeout" in output
    assert "10000 ms" in output


def test_parse_context():
    assert parse_context(None, None) == {}
    assert parse_context('{"paths": ["/tmp/x"]}', "s9") == {"paths": ["/tmp/x"], "session_id": "s9"}
    with pytest.raises(InvalidArgumentError):
        parse_context("{broken", None)


def test_missing_command_is_an_argparse_error():
    with pytest.raises(SystemExit) as exc:
        run_cli()
    assert exc.value.code == 2


def main_runner() -> int:
    tests = [(name, fn) for name, fn in sorted(globals().items())
             if name.startswith("test_") and callable(fn)]
    failed = 0
    for name, fn in tests:
        try:
            fn()
            print(f"✅ {name}")
        except Exception as e:
            failed += 1
            print(f"❌ {name}: {e!r}")
    print(f"\n{len(tests) - failed}/{len(tests)} passed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main_runner())
