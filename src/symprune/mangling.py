"""Length-prefixed mangled-name grammar and demangled-text cleanup."""

from __future__ import annotations

import re
from typing import Iterable

from symprune.constants import (
    FOREIGN_DECLARATION_MARKER,
    MANGLED_PREFIXES,
    MODULE_STRIP_PRECEDING_CHARACTERS,
    SUFFIX_TERMINATOR,
)
from symprune.models import MangledSymbolParts

_COUNTER_SUFFIX = re.compile(r"\.\d+$")
_ANONYMOUS_CONTEXT = re.compile(r"\s+in\s+_[A-Za-z0-9]+")


def _is_digit(char: str) -> bool:
    return "0" <= char <= "9"


def canonical_mangled_name(name: str) -> str | None:
    for marker in MANGLED_PREFIXES:
        position = name.find(marker)
        if position != -1:
            return name[position:]
    return None


def parse_mangled_symbol(name: str) -> MangledSymbolParts:
    """Split ``name`` into its prefix, length-prefixed segments and suffix.

    Non-digit runs found where a length is expected are collected into the
    suffix and scanning continues. Parsing stops at the first record whose
    declared length is zero or runs past the end of the input, keeping what
    was decoded so far.
    """
    end = len(name)
    index = 0
    while index < end and not _is_digit(name[index]):
        index += 1
    prefix = name[:index]

    segments: list[str] = []
    suffix = ""
    while index < end:
        if not _is_digit(name[index]):
            start = index
            while index < end and not _is_digit(name[index]):
                index += 1
            suffix += name[start:index]
            continue

        start = index
        while index < end and _is_digit(name[index]):
            index += 1
        digits = name[start:index].lstrip("0")
        # A length with more digits than the remaining input can never fit.
        if len(digits) > len(str(end - index)):
            break
        length = int(digits or "0")
        if length <= 0 or index + length > end:
            break
        segments.append(name[index : index + length])
        index += length

    return MangledSymbolParts(
        prefix=prefix,
        segments=tuple(segments),
        suffix=suffix or None,
    )


def canonical_suffix_candidate(parts: MangledSymbolParts) -> str | None:
    if parts.suffix:
        return parts.suffix
    if parts.segments:
        return parts.segments[-1]
    return None


def sanitize_suffix(value: str) -> str:
    """Reduce a raw suffix to its trailing upper-case kind code."""
    trimmed = _COUNTER_SUFFIX.sub("", value)
    trimmed = trimmed.rstrip(SUFFIX_TERMINATOR)
    index = len(trimmed)
    while index > 0 and trimmed[index - 1].isupper():
        index -= 1
    tail = trimmed[index:]
    return tail if tail else trimmed


def module_name(parts: MangledSymbolParts) -> str | None:
    # Imported declarations name the foreign entity first, then the module.
    if FOREIGN_DECLARATION_MARKER in parts.prefix and len(parts.segments) >= 2:
        return parts.segments[1]
    if parts.segments:
        return parts.segments[0]
    return None


def extract_module_name(name: str) -> str | None:
    canonical = canonical_mangled_name(name)
    if canonical is None:
        return None
    return module_name(parse_mangled_symbol(canonical)) or None


def strip_module_prefixes(text: str, module: str) -> str:
    """Remove ``module.`` qualifiers that start a name inside ``text``."""
    if not module:
        return text
    target = module + "."
    if target not in text:
        return text

    output: list[str] = []
    index = 0
    while index < len(text):
        if text.startswith(target, index) and (
            index == 0 or text[index - 1] in MODULE_STRIP_PRECEDING_CHARACTERS
        ):
            index += len(target)
            continue
        output.append(text[index])
        index += 1
    return "".join(output)


def strip_anonymous_hash_contexts(text: str) -> str:
    return _ANONYMOUS_CONTEXT.sub("", text).replace("  ", " ")


def clean_demangled_name(name: str, modules_to_strip: Iterable[str]) -> str:
    result = name.replace("__C.", "")
    for module in sorted(modules_to_strip):
        result = strip_module_prefixes(result, module)
        result = result.replace(f"(extension in {module})", "(extension)")
        result = result.replace(f"extension in {module}", "extension")

    result = strip_anonymous_hash_contexts(result)
    while "  " in result:
        result = result.replace("  ", " ")
    return result.strip(" \t")
