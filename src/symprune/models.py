from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePath


@dataclass(frozen=True)
class ObjectRecord:
    index: int
    path: str
    source_path: Path | None = None

    @property
    def base_name(self) -> str:
        return PurePath(self.path).name


@dataclass(frozen=True)
class SymbolRecord:
    address: int
    size: int
    object_index: int
    name: str


@dataclass(frozen=True)
class MangledSymbolParts:
    prefix: str
    segments: tuple[str, ...]
    suffix: str | None = None


@dataclass(frozen=True)
class SourceHint:
    display: str
    path: Path | None = None
    has_source: bool = False


@dataclass(frozen=True)
class LinkMapData:
    path: Path
    objects: dict[int, ObjectRecord]
    symbols: list[SymbolRecord]
    line_count: int = 0

    def object_for(self, symbol: SymbolRecord) -> ObjectRecord | None:
        if symbol.object_index < 0:
            return None
        return self.objects.get(symbol.object_index)


@dataclass(frozen=True)
class DebugOnlySymbol:
    symbol: SymbolRecord
    object: ObjectRecord | None
    hint: SourceHint
    demangled: str | None = None

    @property
    def display_name(self) -> str:
        return self.demangled if self.demangled is not None else self.symbol.name


@dataclass(frozen=True)
class DebugOnlyFile:
    object_path: str
    source_path: Path | None
    display: str
    has_source: bool = False


@dataclass(frozen=True)
class AnalysisResult:
    total_debug_symbols: int
    total_release_symbols: int
    raw_debug_only_count: int
    raw_debug_only_size: int
    filtered_out_count: int
    symbols: tuple[DebugOnlySymbol, ...]
    debug_only_files: tuple[DebugOnlyFile, ...]
    project_modules: frozenset[str] = frozenset()
    display_modules: frozenset[str] = frozenset()

    @property
    def symbols_size(self) -> int:
        return sum(item.symbol.size for item in self.symbols)


@dataclass(frozen=True)
class Configuration:
    debug_path: Path
    release_path: Path
    project_root: Path | None = None
    demangle: bool = True
    group_limit: int = 0
    output_path: Path | None = None
    verbose: bool = False
    source_prefixes: list[str] = field(default_factory=list)
    include_pods: bool = False
