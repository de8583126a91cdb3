from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence

from symprune.constants import (
    DISPLAY_MODULE_MIN_COUNT,
    DISPLAY_MODULE_MIN_SHARE,
    RUNTIME_MODULE_PREFIX,
    SYSTEM_MODULE_NAMES,
)
from symprune.filtering import should_ignore_object
from symprune.mangling import extract_module_name
from symprune.models import LinkMapData, SymbolRecord

_LOGGER = logging.getLogger(__name__)


def determine_project_modules(link_map: LinkMapData) -> frozenset[str]:
    """Collect every mangled module name owned by the project's own objects."""
    modules: set[str] = set()
    for symbol in link_map.symbols:
        module = extract_module_name(symbol.name)
        if not module or module in SYSTEM_MODULE_NAMES:
            continue
        if should_ignore_object(link_map.object_for(symbol)):
            continue
        modules.add(module)
    _LOGGER.debug("Project modules for %s: %s", link_map.path.name, sorted(modules))
    return frozenset(modules)


def infer_project_modules(candidates: Sequence[SymbolRecord]) -> frozenset[str]:
    """Pick the modules common enough among ``candidates`` to strip from display text."""
    if not candidates:
        return frozenset()
    counts = Counter(
        module
        for module in (extract_module_name(symbol.name) for symbol in candidates)
        if module
    )
    if not counts:
        return frozenset()

    minimum_share = max(DISPLAY_MODULE_MIN_COUNT, int(len(candidates) * DISPLAY_MODULE_MIN_SHARE))
    modules = set()
    for module, count in counts.items():
        if count < minimum_share:
            continue
        if module in SYSTEM_MODULE_NAMES or module.startswith("__"):
            continue
        if module.lower().startswith(RUNTIME_MODULE_PREFIX):
            continue
        modules.add(module)
    return frozenset(modules)
