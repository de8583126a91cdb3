from __future__ import annotations

import dataclasses
import logging
from collections import Counter
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path

from symprune.constants import ALLOW_LIST_SUFFIXES, SOURCE_MATCH_THRESHOLD
from symprune.demangle import demangle_symbols
from symprune.filtering import (
    normalize_object_path,
    should_ignore_demangled_symbol,
    should_ignore_object,
    should_keep_symbol,
)
from symprune.mangling import clean_demangled_name, extract_module_name
from symprune.models import (
    AnalysisResult,
    Configuration,
    DebugOnlyFile,
    DebugOnlySymbol,
    LinkMapData,
    ObjectRecord,
    SourceHint,
    SymbolRecord,
)
from symprune.modules import determine_project_modules, infer_project_modules
from symprune.sources import (
    SourceResolver,
    build_source_index,
    literal_source_hint,
    make_source_hint,
    object_name_candidates,
)

_LOGGER = logging.getLogger(__name__)

Demangler = Callable[[Iterable[str]], Mapping[str, str]]


@dataclasses.dataclass
class _ReleaseFootprint:
    keepable_names: set[str]
    paths: set[str]
    base_names: set[str]
    all_names: str

    def has_object(self, obj: ObjectRecord) -> bool:
        return normalize_object_path(obj.path) in self.paths or obj.base_name in self.base_names

    def mentions(self, object_path: str) -> bool:
        stems = object_name_candidates(object_path)
        if not stems:
            return False
        stem = stems[-1]
        # Whole mangled identifier, or the class of an Objective-C method.
        return f"{len(stem)}{stem}" in self.all_names or f"[{stem} " in self.all_names


def analyze(
    debug: LinkMapData,
    release: LinkMapData,
    config: Configuration,
    source_index: dict[str, Path] | None = None,
    resolver: SourceResolver | None = None,
    demangler: Demangler | None = None,
) -> AnalysisResult:
    """Report application symbols and object files that only the debug build links."""
    project_root = config.project_root
    if source_index is None:
        source_index = build_source_index(project_root, include_pods=config.include_pods)
    resolver = resolver or SourceResolver()

    project_modules = determine_project_modules(debug)
    release_side = _tabulate_release(release, determine_project_modules(release))

    footprint: Counter[int] = Counter()
    release_kept_objects: set[int] = set()
    raw: list[SymbolRecord] = []
    for symbol in debug.symbols:
        module = extract_module_name(symbol.name)
        if module and project_modules and module not in project_modules:
            continue
        footprint[symbol.object_index] += 1
        if symbol.name in release_side.keepable_names:
            release_kept_objects.add(symbol.object_index)
            continue
        raw.append(symbol)
    raw_size = sum(symbol.size for symbol in raw)
    _LOGGER.debug("Debug-only symbols (raw): %d (%d bytes)", len(raw), raw_size)

    seen: set[str] = set()
    unique: list[SymbolRecord] = []
    for symbol in raw:
        if symbol.name in seen:
            continue
        seen.add(symbol.name)
        unique.append(symbol)

    attributed = [s for s in unique if not should_ignore_object(debug.object_for(s))]

    def hint_for(obj: ObjectRecord | None, name: str | None = None) -> SourceHint:
        literal = literal_source_hint(name, project_root, source_index) if name else None
        return make_source_hint(obj, project_root, source_index, literal, resolver)

    gate_on_source = _indexed_object_count(debug, source_index) > SOURCE_MATCH_THRESHOLD
    hinted: list[tuple[SymbolRecord, SourceHint]] = []
    for symbol in attributed:
        hint = hint_for(debug.object_for(symbol), symbol.name)
        if gate_on_source and not hint.has_source:
            continue
        hinted.append((symbol, hint))

    display_modules = infer_project_modules([symbol for symbol, _ in hinted])
    filtered_out = 0
    survivors: list[tuple[SymbolRecord, SourceHint]] = []
    for symbol, hint in hinted:
        if should_keep_symbol(symbol.name, ALLOW_LIST_SUFFIXES, project_modules):
            survivors.append((symbol, hint))
        else:
            filtered_out += 1

    demangled_map: Mapping[str, str] = {}
    if config.demangle and survivors:
        demangled_map = (demangler or demangle_symbols)(symbol.name for symbol, _ in survivors)

    results: list[DebugOnlySymbol] = []
    for symbol, hint in survivors:
        demangled = demangled_map.get(symbol.name)
        if demangled is not None:
            if should_ignore_demangled_symbol(demangled):
                continue
            demangled = clean_demangled_name(demangled, display_modules)
        obj = debug.object_for(symbol)
        if obj is not None and hint.has_source:
            obj = dataclasses.replace(obj, source_path=hint.path)
        results.append(DebugOnlySymbol(symbol=symbol, object=obj, hint=hint, demangled=demangled))

    results.sort(key=lambda item: (item.hint.display, -item.symbol.size, item.display_name))

    files = _debug_only_files(
        debug,
        results,
        footprint,
        release_kept_objects,
        release_side,
        gate_on_source,
        hint_for,
    )

    _LOGGER.debug(
        "Debug-only symbols (filtered): %d, debug-only files: %d", len(results), len(files)
    )
    return AnalysisResult(
        total_debug_symbols=len(debug.symbols),
        total_release_symbols=len(release.symbols),
        raw_debug_only_count=len(raw),
        raw_debug_only_size=raw_size,
        filtered_out_count=filtered_out,
        symbols=tuple(results),
        debug_only_files=tuple(files),
        project_modules=project_modules,
        display_modules=display_modules,
    )


def _tabulate_release(release: LinkMapData, modules: frozenset[str]) -> _ReleaseFootprint:
    keepable: set[str] = set()
    for symbol in release.symbols:
        if should_keep_symbol(symbol.name, ALLOW_LIST_SUFFIXES, modules):
            keepable.add(symbol.name)
    return _ReleaseFootprint(
        keepable_names=keepable,
        paths={normalize_object_path(obj.path) for obj in release.objects.values()},
        base_names={obj.base_name for obj in release.objects.values()},
        all_names="\n".join(symbol.name for symbol in release.symbols),
    )


def _indexed_object_count(debug: LinkMapData, source_index: dict[str, Path]) -> int:
    if not source_index:
        return 0
    count = 0
    for obj in debug.objects.values():
        if should_ignore_object(obj):
            continue
        if any(key in source_index for key in object_name_candidates(obj.path)):
            count += 1
    return count


def _debug_only_files(
    debug: LinkMapData,
    symbols: list[DebugOnlySymbol],
    footprint: Counter[int],
    release_kept_objects: set[int],
    release_side: _ReleaseFootprint,
    gate_on_source: bool,
    hint_for: Callable[[ObjectRecord | None], SourceHint],
) -> list[DebugOnlyFile]:
    files: dict[int, DebugOnlyFile] = {}
    for item in symbols:
        index = item.symbol.object_index
        if index in files or index in release_kept_objects or item.object is None:
            continue
        files[index] = _file_entry(item.object, item.hint)

    for index, obj in debug.objects.items():
        if index in files or footprint[index] or should_ignore_object(obj):
            continue
        if release_side.has_object(obj):
            continue
        hint = hint_for(obj)
        if gate_on_source and not hint.has_source:
            continue
        files[index] = _file_entry(obj, hint)

    # Configuration-suffixed objects still show up by name in release symbols.
    kept = [entry for entry in files.values() if not release_side.mentions(entry.object_path)]
    kept.sort(key=lambda entry: (entry.display.lower(), entry.object_path))
    return kept


def _file_entry(obj: ObjectRecord, hint: SourceHint) -> DebugOnlyFile:
    return DebugOnlyFile(
        object_path=obj.path,
        source_path=hint.path if hint.has_source else None,
        display=hint.display,
        has_source=hint.has_source,
    )
