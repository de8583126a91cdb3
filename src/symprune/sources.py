from __future__ import annotations

import logging
import os
from pathlib import Path, PurePath

from symprune.constants import (
    DEPENDENCY_MANAGER_DIRECTORY,
    LITERAL_MARKER,
    PROBE_EXTENSIONS,
    RUNTIME_GENERATED_SOURCE_MARKER,
    SOURCE_INDEX_EXTENSIONS,
    SOURCE_INDEX_SKIPPED_DIRECTORIES,
)
from symprune.models import ObjectRecord, SourceHint

_LOGGER = logging.getLogger(__name__)


def build_source_index(root: Path | None, include_pods: bool = False) -> dict[str, Path]:
    """Map source file stems under ``root`` to their paths. First match wins."""
    if root is None or not root.is_dir():
        return {}
    index: dict[str, Path] = {}
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(
            name
            for name in dirnames
            if not name.startswith(".")
            and name not in SOURCE_INDEX_SKIPPED_DIRECTORIES
            and (include_pods or name != DEPENDENCY_MANAGER_DIRECTORY)
        )
        for name in sorted(filenames):
            if name.startswith("."):
                continue
            path = Path(dirpath) / name
            if path.suffix.lower() not in SOURCE_INDEX_EXTENSIONS:
                continue
            index.setdefault(path.stem, path)
    _LOGGER.debug("Indexed %d source files under %s", len(index), root)
    return index


def relative_path(path: Path, base: Path | None) -> str:
    if base is None:
        return str(path)
    full = os.path.normpath(os.path.abspath(path))
    base_path = os.path.normpath(os.path.abspath(base))
    if full.startswith(base_path + os.sep):
        return full[len(base_path) + 1 :]
    return path.name


class SourceResolver:
    """Finds files by name under a project root, caching results per root."""

    def __init__(self) -> None:
        self._cache: dict[str, dict[str, Path | None]] = {}

    def find_source_file(self, filename: str, root: Path | None) -> Path | None:
        if root is None:
            return None
        # Generated at build time, never checked in.
        if RUNTIME_GENERATED_SOURCE_MARKER in filename.lower():
            return None

        root_key = os.path.normpath(os.path.abspath(root))
        known = self._cache.setdefault(root_key, {})
        if filename in known:
            _LOGGER.debug("cached result for %s: %s", filename, known[filename])
            return known[filename]

        located = _walk_for(filename, root)
        if located is None:
            _LOGGER.debug("no match for %s under %s", filename, root)
        else:
            _LOGGER.debug("found match for %s: %s", filename, located)
        known[filename] = located
        return located


def _walk_for(filename: str, root: Path) -> Path | None:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        if filename in filenames:
            return Path(dirpath) / filename
    return None


def path_exists(path: Path) -> bool:
    """Like ``Path.exists`` but false for names the OS rejects, such as over-long ones."""
    try:
        return path.exists()
    except (OSError, ValueError):
        return False


def _hint_for(path: Path, project_root: Path | None) -> SourceHint:
    return SourceHint(display=relative_path(path, project_root), path=path, has_source=True)


def literal_source_hint(
    symbol_name: str,
    project_root: Path | None,
    source_index: dict[str, Path],
) -> SourceHint | None:
    """Resolve a source file from a literal-pool symbol whose payload is a path."""
    position = symbol_name.lower().find(LITERAL_MARKER)
    if position == -1:
        return None
    payload = symbol_name[position + len(LITERAL_MARKER) :].strip(" \t")
    if not payload:
        return None

    payload_path = PurePath(payload)
    indexed = source_index.get(payload_path.stem)
    if indexed is not None:
        return _hint_for(indexed, project_root)

    if project_root is not None:
        # Module separators are sometimes flattened to underscores.
        candidate = project_root / payload.replace("_", "/")
        if path_exists(candidate):
            return _hint_for(candidate, project_root)

    if "/" not in payload and not payload_path.suffix:
        return None

    if payload.startswith("/"):
        absolute = Path(payload)
        if path_exists(absolute):
            return _hint_for(absolute, project_root)

    if project_root is not None:
        candidate = project_root / payload
        if path_exists(candidate):
            return _hint_for(candidate, project_root)
    return None


def object_name_candidates(object_path: str) -> list[str]:
    """Stems of an object file name, stripping one extension at a time."""
    name = PurePath(object_path).name
    candidates: list[str] = []
    current = PurePath(name).stem
    while current and current not in candidates:
        candidates.append(current)
        stripped = PurePath(current).stem
        if stripped == current:
            break
        current = stripped
    return candidates


def make_source_hint(
    obj: ObjectRecord | None,
    project_root: Path | None,
    source_index: dict[str, Path],
    literal_hint: SourceHint | None = None,
    resolver: SourceResolver | None = None,
) -> SourceHint:
    if obj is None:
        return literal_hint or SourceHint(display="(unknown.o)")

    candidates = object_name_candidates(obj.path)
    for key in candidates:
        indexed = source_index.get(key)
        if indexed is not None:
            return _hint_for(indexed, project_root)

    if project_root is not None:
        resolver = resolver or SourceResolver()
        for key in candidates:
            for extension in PROBE_EXTENSIONS:
                located = resolver.find_source_file(key + extension, project_root)
                if located is not None:
                    return _hint_for(located, project_root)

    if literal_hint is not None:
        return literal_hint

    stem = candidates[-1] if candidates else PurePath(obj.path).name
    fallback = Path(obj.path).parent / (stem + PROBE_EXTENSIONS[0])
    display = relative_path(fallback, project_root) if project_root is not None else fallback.name
    return SourceHint(
        display=display,
        path=fallback if path_exists(fallback) else None,
        has_source=False,
    )
