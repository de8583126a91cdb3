from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from symprune.linkmap import LinkMapError, parse_link_map, parse_link_map_text
from symprune.models import SymbolRecord

SAMPLE = textwrap.dedent(
    """\
    # Path: /proj/build/App
    # Arch: arm64
    # Object files:
    [  0] linker synthesized
    [  1] /proj/build/App.build/Objects/AppView.o
    [ 12] /proj/build/App.build/Objects/Model Store.o
    # Sections:
    # Address\tSize    \tSegment\tSection
    0x100004000\t0x00001000\t__TEXT\t__text
    # Symbols:
    # Address\tSize    \tFile  Name
    0x100004000\t0x00000040\t[  1] _$s3App7AppViewV4bodyyyF
    0x100004040\t0x0000001C\t[ 12] -[ModelStore save:]
    not a symbol line
    # Dead Stripped Symbols:
    #        \tSize    \tFile  Name
    <<dead>> \t0x00000018\t[  1] _$s3App7AppViewV6unusedyyF
    0x100009000\t0x00000010\t[  1] _$s3App7AppViewV5afteryyF
    """
)


def test_parse_link_map_text_reads_objects_and_symbols() -> None:
    link_map = parse_link_map_text(SAMPLE, Path("Debug.linkmap"))

    assert sorted(link_map.objects) == [0, 1, 12]
    assert link_map.objects[12].path == "/proj/build/App.build/Objects/Model Store.o"
    assert link_map.objects[12].base_name == "Model Store.o"
    assert [symbol.name for symbol in link_map.symbols] == [
        "_$s3App7AppViewV4bodyyyF",
        "-[ModelStore save:]",
    ]
    first = link_map.symbols[0]
    assert (first.address, first.size, first.object_index) == (0x100004000, 0x40, 1)
    assert link_map.symbols[1].size == 0x1C


def test_parse_link_map_text_ignores_lines_before_sections() -> None:
    text = "[  3] /stray/Object.o\n0x1\t0x2\t[  3] _stray\n# Object files:\n[  0] linker synthesized\n"

    link_map = parse_link_map_text(text, Path("x.linkmap"))

    assert list(link_map.objects) == [0]
    assert link_map.symbols == []


def test_object_for_resolves_only_known_indices() -> None:
    link_map = parse_link_map_text(SAMPLE, Path("Debug.linkmap"))

    assert link_map.object_for(link_map.symbols[0]).base_name == "AppView.o"
    assert link_map.object_for(SymbolRecord(0, 0, 99, "_x")) is None
    assert link_map.object_for(SymbolRecord(0, 0, -1, "_x")) is None


def test_parse_link_map_reads_file(tmp_path: Path) -> None:
    path = tmp_path / "Release.linkmap"
    path.write_text(SAMPLE, encoding="utf-8")

    link_map = parse_link_map(path)

    assert link_map.path == path
    assert len(link_map.symbols) == 2
    assert link_map.line_count == SAMPLE.count("\n") + 1


def test_parse_link_map_missing_file(tmp_path: Path) -> None:
    with pytest.raises(LinkMapError, match="not found"):
        parse_link_map(tmp_path / "missing.linkmap")


def test_parse_link_map_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "binary.linkmap"
    path.write_bytes(b"# Object files:\n\xff\xfe\x00")

    with pytest.raises(LinkMapError, match="UTF-8"):
        parse_link_map(path)
