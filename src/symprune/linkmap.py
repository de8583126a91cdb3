from __future__ import annotations

import logging
import re
from pathlib import Path

from symprune.models import LinkMapData, ObjectRecord, SymbolRecord

_LOGGER = logging.getLogger(__name__)

OBJECT_FILES_HEADER = "# Object files:"
SECTIONS_HEADER = "# Sections:"
SYMBOLS_HEADER = "# Symbols:"
DEAD_STRIPPED_HEADER = "# Dead Stripped Symbols:"

_OBJECT_LINE = re.compile(r"\[\s*(\d+)\]\s+(.+)")
_SYMBOL_LINE = re.compile(r"0x([0-9A-Fa-f]+)\s+0x([0-9A-Fa-f]+)\s+\[\s*(\d+)\]\s+(.+)")


class LinkMapError(Exception):
    """Raised when a link map cannot be read."""


def parse_link_map(path: Path) -> LinkMapData:
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise LinkMapError(f"Link map not found: {path}") from exc
    except UnicodeDecodeError as exc:
        raise LinkMapError(f"Link map is not valid UTF-8: {path}") from exc
    except OSError as exc:
        raise LinkMapError(f"Unable to read link map {path}: {exc.strerror or exc}") from exc
    return parse_link_map_text(content, path)


def parse_link_map_text(content: str, path: Path) -> LinkMapData:
    """Parse link-map text. Lines outside the object and symbol sections are ignored."""
    section = "header"
    objects: dict[int, ObjectRecord] = {}
    symbols: list[SymbolRecord] = []
    lines = content.split("\n")

    for line in lines:
        if line.startswith(OBJECT_FILES_HEADER):
            section = "objects"
            continue
        if line.startswith(SECTIONS_HEADER):
            section = "sections"
            continue
        if line.startswith(SYMBOLS_HEADER):
            section = "symbols"
            continue
        if line.startswith(DEAD_STRIPPED_HEADER):
            break

        if section == "objects":
            match = _OBJECT_LINE.search(line)
            if match:
                index = int(match.group(1))
                objects[index] = ObjectRecord(index=index, path=match.group(2).rstrip("\r"))
        elif section == "symbols":
            match = _SYMBOL_LINE.search(line)
            if match:
                symbols.append(
                    SymbolRecord(
                        address=int(match.group(1), 16),
                        size=int(match.group(2), 16),
                        object_index=int(match.group(3)),
                        name=match.group(4).rstrip("\r"),
                    )
                )

    _LOGGER.debug(
        "Parsed %s: %d objects, %d symbols", path.name, len(objects), len(symbols)
    )
    return LinkMapData(path=path, objects=objects, symbols=symbols, line_count=len(lines))
