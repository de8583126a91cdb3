from __future__ import annotations

import logging
import subprocess
import time
from collections.abc import Iterable, Sequence

from symprune.constants import DEMANGLE_BATCH_SIZE, DEMANGLE_COMMAND, DEMANGLE_SEPARATOR
from symprune.mangling import canonical_mangled_name

_LOGGER = logging.getLogger(__name__)


def demangle_symbols(
    names: Iterable[str],
    command: Sequence[str] = DEMANGLE_COMMAND,
    batch_size: int = DEMANGLE_BATCH_SIZE,
) -> dict[str, str]:
    """Demangle ``names`` with an external tool, batch by batch.

    Returns a mapping from each original name to its demangled text. Names the
    tool could not handle, and every name of a failed batch, are left out.
    """
    originals_by_canonical: dict[str, list[str]] = {}
    for name in names:
        canonical = canonical_mangled_name(name)
        if canonical is None:
            continue
        originals = originals_by_canonical.setdefault(canonical, [])
        if name not in originals:
            originals.append(name)

    canonical_names = sorted(originals_by_canonical)
    if not canonical_names:
        return {}

    batches = [
        canonical_names[start : start + batch_size]
        for start in range(0, len(canonical_names), batch_size)
    ]
    _LOGGER.debug(
        "Demangling %d symbol(s) across %d batch(es)...", len(canonical_names), len(batches)
    )

    mapping: dict[str, str] = {}
    resolved: set[str] = set()
    for batch_index, batch in enumerate(batches):
        for canonical, demangled in demangle_batch(batch, command, batch_index).items():
            originals = originals_by_canonical.get(canonical)
            if originals is None:
                continue
            resolved.add(canonical)
            for original in originals:
                mapping.setdefault(original, demangled)

    missing = len(canonical_names) - len(resolved)
    if missing:
        _LOGGER.debug("Demangle missing %d canonical symbol(s)", missing)
    return mapping


def demangle_batch(
    batch: Sequence[str],
    command: Sequence[str] = DEMANGLE_COMMAND,
    batch_index: int = 0,
) -> dict[str, str]:
    if not batch:
        return {}
    started = time.monotonic()
    _LOGGER.debug("Launching demangler batch %d...", batch_index + 1)
    try:
        process = subprocess.Popen(
            [*command, *batch],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as exc:
        _LOGGER.warning("Demangler launch failed for batch %d: %s", batch_index + 1, exc)
        return {}

    # communicate() reads stdout and stderr concurrently, so neither pipe can fill up.
    output, errors = process.communicate()
    elapsed = time.monotonic() - started
    if process.returncode != 0:
        message = errors.strip()
        if message:
            _LOGGER.warning(
                "Demangler batch %d exited with status %d: %s",
                batch_index + 1,
                process.returncode,
                message,
            )
        else:
            _LOGGER.warning(
                "Demangler batch %d exited with status %d in %.2fs",
                batch_index + 1,
                process.returncode,
                elapsed,
            )
        return {}

    mapping = parse_demangler_output(output)
    _LOGGER.debug("Batch %d demangled %d in %.2fs", batch_index + 1, len(mapping), elapsed)
    return mapping


def parse_demangler_output(output: str) -> dict[str, str]:
    """Parse ``mangled ---> demangled`` lines, joining continuation lines."""
    mapping: dict[str, str] = {}
    current: str | None = None
    parts: list[str] = []

    def flush() -> None:
        nonlocal current, parts
        if current is not None:
            joined = "".join(parts)
            if joined:
                mapping[current] = joined
        current = None
        parts = []

    for line in output.splitlines():
        if not line:
            flush()
            continue
        if DEMANGLE_SEPARATOR in line:
            flush()
            mangled, _, demangled = line.partition(DEMANGLE_SEPARATOR)
            mangled = mangled.strip(" \t")
            demangled = demangled.strip(" \t")
            current = mangled or None
            parts = [demangled] if demangled else []
        elif current is not None:
            part = line.strip(" \t")
            if part:
                parts.append(part)
    flush()
    return mapping
