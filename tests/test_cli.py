from __future__ import annotations

import argparse
import textwrap
from pathlib import Path

import pytest

from symprune import cli

DEBUG_MAP = textwrap.dedent(
    """\
    # Path: /proj/build/App
    # Object files:
    [  0] linker synthesized
    [  1] /proj/build/App.o
    [  2] /proj/build/Unused.o
    # Sections:
    # Symbols:
    # Address\tSize    \tFile  Name
    0x100004000\t0x00000040\t[  1] _$s3App6WidgetV4mainyyF
    0x100004040\t0x00000020\t[  1] _$s3App6WidgetV6unusedyyF
    """
)

RELEASE_MAP = textwrap.dedent(
    """\
    # Path: /proj/build/App
    # Object files:
    [  0] linker synthesized
    [  1] /proj/build/App.o
    # Sections:
    # Symbols:
    # Address\tSize    \tFile  Name
    0x100004000\t0x00000040\t[  1] _$s3App6WidgetV4mainyyF
    """
)


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


def _link_maps(tmp_path: Path) -> tuple[Path, Path]:
    debug = tmp_path / "Debug-LinkMap.txt"
    release = tmp_path / "Release-LinkMap.txt"
    _write(debug, DEBUG_MAP)
    _write(release, RELEASE_MAP)
    return debug, release


def _args(*values: str) -> list[str]:
    return [*values, "--no-demangle"]


def test_help_exits_zero() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--help"])
    assert excinfo.value.code == 0


def test_missing_debug_path_is_an_error() -> None:
    with pytest.raises(SystemExit, match="Missing debug link map path"):
        cli.main([], environ={})


def test_missing_release_path_is_an_error(tmp_path: Path) -> None:
    debug, _ = _link_maps(tmp_path)
    with pytest.raises(SystemExit, match="Missing release link map path"):
        cli.main(["--debug", str(debug)], environ={})


def test_unreadable_link_map_exits_with_message(tmp_path: Path) -> None:
    _, release = _link_maps(tmp_path)
    with pytest.raises(SystemExit, match="error: Link map not found"):
        cli.main(_args(str(tmp_path / "missing.txt"), str(release)), environ={})


def test_project_root_must_be_a_directory(tmp_path: Path) -> None:
    debug, release = _link_maps(tmp_path)
    with pytest.raises(SystemExit, match="Project root is not a directory"):
        cli.main(_args(str(debug), str(release), "--project-root", str(tmp_path / "nope")), environ={})


def test_reports_debug_only_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    debug, release = _link_maps(tmp_path)

    assert cli.main(_args(str(debug), str(release)), environ={}) == 0

    output = capsys.readouterr().out
    assert "Debug-only symbols grouped by file (2 total):" in output
    assert "/proj/build/App.o:1:1: warning:    $s3App6WidgetV6unusedyyF" in output
    assert "Unused.o - unused in release" in output
    assert "WidgetV4main" not in output


def test_environment_supplies_paths_and_output(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    debug, release = _link_maps(tmp_path)
    report = tmp_path / "out" / "report.txt"
    environ = {
        "DEBUG_LINKMAP": str(debug),
        "RELEASE_LINKMAP": str(release),
        "DEAD_CODE_OUTPUT": str(report),
        "DEAD_CODE_DEMANGLE": "0",
    }

    assert cli.main([], environ=environ) == 0

    assert report.read_text() == capsys.readouterr().out


def test_identical_link_maps_report_nothing(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    debug, _ = _link_maps(tmp_path)

    assert cli.main(_args("--debug", str(debug), "--release", str(debug)), environ={}) == 0

    assert capsys.readouterr().out.strip() == (
        "No application-owned debug-only symbols were detected after filtering."
    )


def test_group_limit_rejects_non_positive_values(tmp_path: Path) -> None:
    debug, release = _link_maps(tmp_path)
    with pytest.raises(SystemExit):
        cli.main(_args(str(debug), str(release), "--group-limit", "0"), environ={})


def test_configuration_from_environment(tmp_path: Path) -> None:
    parser_args = argparse.Namespace(
        linkmaps=[],
        debug=None,
        release=None,
        project_root=None,
        out=None,
        demangle=None,
        group_limit=None,
        source_prefix=[],
        include_pods=False,
        verbose=False,
    )
    environ = {
        "DEBUG_LINKMAP": "Debug.txt",
        "RELEASE_LINKMAP": "Release.txt",
        "PROJECT_DIR": str(tmp_path),
        "DEAD_CODE_GROUP_LIMIT": "5",
        "DEAD_CODE_VERBOSE": "yes",
        "DEAD_CODE_DEMANGLE": "off",
        "SCRIPT_INPUT_FILE_COUNT": "3",
        "SCRIPT_INPUT_FILE_0": "/proj/App/Sources/Main.swift",
        "SCRIPT_INPUT_FILE_1": "/proj/App/Sources/Other.swift",
        "SCRIPT_INPUT_FILE_2": "/proj/Widgets/Clock.swift",
    }

    config = cli.build_configuration(parser_args, environ)

    assert config.debug_path == Path("Debug.txt")
    assert config.release_path == Path("Release.txt")
    assert config.project_root == tmp_path.resolve()
    assert config.group_limit == 5
    assert config.verbose is True
    assert config.demangle is False
    assert config.source_prefixes == ["Sources", "Widgets"]


def test_explicit_source_prefixes_win() -> None:
    environ = {"DEAD_CODE_SOURCE_PREFIXES": "App:Shared"}
    assert cli._source_prefixes(["Core"], environ) == ["Core"]
    assert cli._source_prefixes([], environ) == ["App", "Shared"]
    assert cli._source_prefixes([], {"SCRIPT_INPUT_FILE_COUNT": "many"}) == []
