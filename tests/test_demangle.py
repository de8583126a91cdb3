from __future__ import annotations

import logging
import textwrap
from pathlib import Path

import pytest

from symprune.demangle import demangle_batch, demangle_symbols, parse_demangler_output


def _script(tmp_path: Path, body: str) -> list[str]:
    path = tmp_path / "fake-demangle.sh"
    path.write_text("#!/bin/sh\n" + textwrap.dedent(body))
    return ["sh", str(path)]


ECHO_TOOL = """\
    for name in "$@"; do
      echo "$name ---> demangled $name"
    done
    echo "called" >> "$(dirname "$0")/calls.log"
"""


def test_parse_demangler_output_joins_continuation_lines() -> None:
    output = (
        "$s3App1fyyF ---> App.f() -> ()\n"
        "$s3App1gyyF ---> App.g(\n"
        "  x: Swift.Int) -> ()\n"
        "\n"
        "stray line\n"
        "$s3App1hyyF ---> \n"
    )

    assert parse_demangler_output(output) == {
        "$s3App1fyyF": "App.f() -> ()",
        "$s3App1gyyF": "App.g(x: Swift.Int) -> ()",
    }


def test_demangle_symbols_maps_back_to_original_names(tmp_path: Path) -> None:
    command = _script(tmp_path, ECHO_TOOL)

    mapping = demangle_symbols(["_$s3App1fyyF", "$s3App1fyyF", "_main"], command=command)

    assert mapping == {
        "_$s3App1fyyF": "demangled $s3App1fyyF",
        "$s3App1fyyF": "demangled $s3App1fyyF",
    }


def test_demangle_symbols_runs_sequential_batches(tmp_path: Path) -> None:
    command = _script(tmp_path, ECHO_TOOL)
    names = [f"_$s3App2f{i}yyF" for i in range(5)]

    mapping = demangle_symbols(names, command=command, batch_size=2)

    assert set(mapping) == set(names)
    assert (tmp_path / "calls.log").read_text().count("called") == 3


def test_failed_batch_is_dropped_and_logged(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    command = _script(tmp_path, 'echo "boom" >&2\nexit 3\n')

    with caplog.at_level(logging.WARNING, logger="symprune.demangle"):
        mapping = demangle_symbols(["_$s3App1fyyF"], command=command)

    assert mapping == {}
    assert "exited with status 3: boom" in caplog.text


def test_missing_tool_degrades_to_empty_mapping(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="symprune.demangle"):
        mapping = demangle_batch(["$s3App1fyyF"], command=[str(tmp_path / "no-such-tool")])

    assert mapping == {}
    assert "launch failed" in caplog.text


def test_nothing_to_demangle() -> None:
    assert demangle_symbols(["_main", "-[A b]"]) == {}
    assert demangle_batch([]) == {}
