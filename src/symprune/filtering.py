from __future__ import annotations

import os
from collections.abc import Collection

from symprune.constants import (
    ALLOW_LIST_SUFFIXES,
    COMPOSITE_VIEW_MANGLED_TYPES,
    DEFER_MARKER,
    DEMANGLED_COMPOSITE_VIEW_MARKERS,
    DEMANGLED_NOISE_TOKENS,
    IGNORABLE_OBJECT_MARKERS,
    IGNORABLE_OBJECT_MARKERS_LOWERCASED,
    NOISE_PREFIXES,
    NOISE_SUBSTRINGS,
    PRIVATE_DISCRIMINATOR_TOKEN,
    RELOCATION_INDICATORS,
    RESUME_MARKER,
    RESUME_SUFFIX,
    UNWIND_FRAME_MARKERS,
    UNWIND_TABLE_MARKER,
)
from symprune.mangling import (
    canonical_mangled_name,
    canonical_suffix_candidate,
    module_name,
    parse_mangled_symbol,
    sanitize_suffix,
)
from symprune.models import ObjectRecord


def should_ignore_object(obj: ObjectRecord | None) -> bool:
    if obj is None:
        return True
    path = obj.path
    if any(marker in path for marker in IGNORABLE_OBJECT_MARKERS):
        return True
    lowered = path.lower()
    return any(marker in lowered for marker in IGNORABLE_OBJECT_MARKERS_LOWERCASED)


def normalize_object_path(path: str) -> str:
    return os.path.normpath(os.path.abspath(path))


def is_objc_method_symbol(name: str) -> bool:
    if len(name) < 2 or name[0] not in "-+" or name[1] != "[":
        return False
    closing = name.find("]")
    return closing > 2


def _is_noise(name: str) -> bool:
    lower = name.lower()
    if any(token in lower for token in NOISE_SUBSTRINGS):
        return True
    if lower.startswith(NOISE_PREFIXES):
        return True
    if DEFER_MARKER in lower:
        return True
    if lower.endswith(RESUME_SUFFIX) or RESUME_MARKER in lower:
        return True
    if any(marker in name for marker in COMPOSITE_VIEW_MANGLED_TYPES):
        return True
    if PRIVATE_DISCRIMINATOR_TOKEN in name:
        return True
    if UNWIND_TABLE_MARKER in name:
        upper = name.upper()
        if any(marker in upper for marker in UNWIND_FRAME_MARKERS):
            return True
    return any(indicator in lower for indicator in RELOCATION_INDICATORS)


def should_keep_symbol(
    name: str,
    allowed_suffixes: Collection[str] = ALLOW_LIST_SUFFIXES,
    allowed_modules: Collection[str] = frozenset(),
) -> bool:
    """Decide whether a raw link-map symbol names a reportable declaration.

    Cheap substring rules run first. Bracketed Objective-C methods are kept
    as-is; anything else must be a mangled name whose kind code is in
    ``allowed_suffixes`` and, when ``allowed_modules`` is non-empty, whose
    module is one of them.
    """
    if _is_noise(name):
        return False
    if is_objc_method_symbol(name):
        return True

    canonical = canonical_mangled_name(name)
    if canonical is None:
        return False
    parts = parse_mangled_symbol(canonical)
    suffix = canonical_suffix_candidate(parts)
    if suffix is None:
        return False
    normalized = sanitize_suffix(suffix).upper()
    if not normalized or normalized not in allowed_suffixes:
        return False
    if not allowed_modules:
        return True
    module = module_name(parts)
    return module is not None and module in allowed_modules


def should_ignore_demangled_symbol(text: str) -> bool:
    lower = text.lower()
    if any(token in lower for token in DEMANGLED_NOISE_TOKENS):
        return True
    return any(marker in text for marker in DEMANGLED_COMPOSITE_VIEW_MARKERS)
