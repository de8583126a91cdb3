from __future__ import annotations

import os
from pathlib import Path, PurePath

from symprune.models import AnalysisResult, Configuration, DebugOnlyFile, DebugOnlySymbol
from symprune.sources import path_exists, relative_path

_UNITS = ("B", "KB", "MB", "GB")


def format_bytes(value: int) -> str:
    if value < 1024:
        return f"{value} B"
    amount = float(value)
    unit = 0
    while amount >= 1024.0 and unit < len(_UNITS) - 1:
        amount /= 1024.0
        unit += 1
    return f"{amount:.1f} {_UNITS[unit]}"


def symbol_note(item: DebugOnlySymbol) -> str | None:
    lowered = item.display_name.lower()
    if "previewprovider" in lowered or ".previews" in lowered:
        return "[Preview]"
    if "widget" in lowered and "timelineentry" in lowered:
        return "[Widget]"
    return None


def _display_name(source_path: Path | None, object_path: str | None, config: Configuration) -> str:
    if source_path is not None:
        relative = relative_path(source_path, config.project_root).strip()
        if relative:
            return PurePath(relative).name
        return source_path.name
    if object_path:
        base = PurePath(object_path).name
        if base:
            return base
    return "(unknown)"


def _context_path(source_path: Path | None, object_path: str | None, config: Configuration) -> str | None:
    if source_path is not None:
        return relative_path(source_path, config.project_root)
    if object_path:
        return relative_path(Path(object_path), config.project_root)
    return None


def diagnostic_path(source_path: Path | None, object_path: str | None, config: Configuration) -> str | None:
    """Best path for an editor-style ``path:1:1: warning:`` line."""
    if source_path is not None:
        return str(source_path)
    if not object_path:
        return None
    if object_path.startswith("/"):
        return object_path
    root = config.project_root
    if root is None:
        return object_path
    if "/" in object_path:
        return str(root / object_path)
    for prefix in config.source_prefixes or [""]:
        candidate = root / prefix / object_path
        if path_exists(candidate):
            return str(candidate)
    return str(root / object_path)


def _symbol_paths(item: DebugOnlySymbol) -> tuple[Path | None, str | None]:
    if item.object is None:
        return item.hint.path if item.hint.has_source else None, None
    return item.object.source_path, item.object.path


def _warning(path: str | None, message: str) -> str:
    if path is None:
        return message
    return f"{path}:1:1: warning: {message}"


def report_lines(result: AnalysisResult, config: Configuration) -> list[str]:
    lines: list[str] = []
    if config.verbose:
        lines.extend(
            [
                f"Debug link map: {config.debug_path}",
                f"Release link map: {config.release_path}",
                f"Total debug symbols: {result.total_debug_symbols}",
                f"Total release symbols: {result.total_release_symbols}",
                f"Debug-only symbols (raw): {result.raw_debug_only_count} "
                f"({format_bytes(result.raw_debug_only_size)})",
                f"Debug-only symbols (filtered): {len(result.symbols)} "
                f"({format_bytes(result.symbols_size)})",
            ]
        )

    if not result.symbols and not result.debug_only_files:
        if lines:
            lines.append("")
        lines.append("No application-owned debug-only symbols were detected after filtering.")
        return lines

    grouped: dict[str, list[DebugOnlySymbol]] = {}
    for item in result.symbols:
        source_path, object_path = _symbol_paths(item)
        grouped.setdefault(_display_name(source_path, object_path, config), []).append(item)
    file_groups: dict[str, list[DebugOnlyFile]] = {}
    for entry in result.debug_only_files:
        display = _display_name(entry.source_path, entry.object_path, config)
        file_groups.setdefault(display, []).append(entry)

    displays = sorted(set(grouped) | set(file_groups), key=str.lower)
    if lines:
        lines.append("")
    lines.append(f"Debug-only symbols grouped by file ({len(displays)} total):")
    if 0 < config.group_limit < len(displays):
        lines.append(f"(showing first {config.group_limit} files)")
        displays = displays[: config.group_limit]

    for display in displays:
        symbols = sorted(
            grouped.get(display, []),
            key=lambda item: (-item.symbol.size, item.display_name),
        )
        entries = file_groups.get(display, [])
        if not symbols:
            lines.extend(_unused_file_lines(display, entries, config))
            continue
        lines.extend(_symbol_group_lines(display, symbols, entries, config))
    return lines


def _unused_file_lines(display: str, entries: list[DebugOnlyFile], config: Configuration) -> list[str]:
    lines = []
    message = f"{display} - unused in release"
    for entry in entries:
        context = _context_path(entry.source_path, entry.object_path, config)
        text = f"{message} ({context})" if context and context != display else message
        lines.append(_warning(diagnostic_path(entry.source_path, entry.object_path, config), text))
    return lines


def _symbol_group_lines(
    display: str,
    symbols: list[DebugOnlySymbol],
    entries: list[DebugOnlyFile],
    config: Configuration,
) -> list[str]:
    fallback = entries[0] if entries else None
    header_path = next(
        (
            path
            for path in (diagnostic_path(*_symbol_paths(item), config) for item in symbols)
            if path
        ),
        None,
    )
    if header_path is None and fallback is not None:
        header_path = diagnostic_path(fallback.source_path, fallback.object_path, config)

    if header_path is not None and os.path.isabs(header_path):
        context = relative_path(Path(header_path), config.project_root)
    else:
        context = header_path
    summary = f"{display} - {context}" if context and context != display else display

    lines = [_warning(header_path, summary)]
    for item in symbols:
        name = item.display_name
        if item.demangled is None and name.startswith("_"):
            name = name[1:]
        note = symbol_note(item)
        if note:
            name = f"{name} {note}"
        path = diagnostic_path(*_symbol_paths(item), config)
        lines.append(_warning(path, f"   {name}") if path else f"    {name}")
    return lines


def write_report(lines: list[str], output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
