from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path

from symprune import __version__
from symprune.models import Configuration

_LOGGER = logging.getLogger(__name__)

_FALSE_VALUES = {"0", "false", "no", "off"}


def main(argv: Iterable[str] | None = None, environ: Mapping[str, str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="symprune",
        description=(
            "Compare the link maps of a debug and a release build and list "
            "application symbols and files only the debug build links."
        ),
    )
    parser.add_argument("linkmaps", nargs="*", metavar="LINKMAP", help="Debug then release link map")
    parser.add_argument("--debug", "-d", help="Debug build link map (env: DEBUG_LINKMAP)")
    parser.add_argument("--release", "-r", help="Release build link map (env: RELEASE_LINKMAP)")
    parser.add_argument(
        "--project-root",
        "-p",
        help="Project root used to locate sources (env: PROJECT_DIR)",
    )
    parser.add_argument("--out", help="Also write the report to this file (env: DEAD_CODE_OUTPUT)")
    parser.add_argument(
        "--demangle",
        dest="demangle",
        action="store_true",
        default=None,
        help="Demangle symbols with swift-demangle (default)",
    )
    parser.add_argument(
        "--no-demangle",
        dest="demangle",
        action="store_false",
        help="Skip demangling (env: DEAD_CODE_DEMANGLE=0)",
    )
    parser.add_argument(
        "--group-limit",
        type=_positive_int,
        default=None,
        help="Maximum number of file groups to report (env: DEAD_CODE_GROUP_LIMIT)",
    )
    parser.add_argument(
        "--source-prefix",
        action="append",
        default=[],
        help="Relative path to probe under the project root (repeatable)",
    )
    parser.add_argument(
        "--include-pods",
        action="store_true",
        help="Index sources under Pods/ as well",
    )
    parser.add_argument("--verbose", action="store_true", help="Verbose logging to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args(list(argv) if argv is not None else None)
    env = os.environ if environ is None else environ
    config = build_configuration(args, env)

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format="%(message)s",
    )

    from symprune.analyzer import analyze
    from symprune.linkmap import LinkMapError, parse_link_map
    from symprune.report import report_lines, write_report

    try:
        debug_map = parse_link_map(config.debug_path)
        _LOGGER.info("Parsed %s: %d lines", config.debug_path.name, debug_map.line_count)
        release_map = parse_link_map(config.release_path)
        _LOGGER.info("Parsed %s: %d lines", config.release_path.name, release_map.line_count)
    except LinkMapError as exc:
        raise SystemExit(f"error: {exc}") from exc

    result = analyze(debug_map, release_map, config)
    lines = report_lines(result, config)
    for line in lines:
        print(line)

    if config.output_path is not None:
        try:
            write_report(lines, config.output_path)
        except OSError as exc:
            raise SystemExit(f"error: Unable to write report to {config.output_path}: {exc}") from exc
    return 0


def build_configuration(args: argparse.Namespace, env: Mapping[str, str]) -> Configuration:
    positionals = list(args.linkmaps)
    debug = args.debug or (positionals.pop(0) if positionals else None) or env.get("DEBUG_LINKMAP")
    release = (
        args.release or (positionals.pop(0) if positionals else None) or env.get("RELEASE_LINKMAP")
    )
    if positionals:
        raise SystemExit(f"error: Unexpected argument {positionals[0]}")
    if not debug:
        raise SystemExit("error: Missing debug link map path")
    if not release:
        raise SystemExit("error: Missing release link map path")

    project_root_value = args.project_root or env.get("PROJECT_DIR")
    project_root = None
    if project_root_value:
        project_root = Path(project_root_value).resolve()
        if not project_root.is_dir():
            raise SystemExit(f"error: Project root is not a directory: {project_root}")

    demangle = args.demangle
    if demangle is None:
        demangle = _env_flag(env, "DEAD_CODE_DEMANGLE", default=True)

    group_limit = args.group_limit
    if group_limit is None:
        raw_limit = env.get("DEAD_CODE_GROUP_LIMIT", "")
        try:
            group_limit = _positive_int(raw_limit) if raw_limit else 0
        except argparse.ArgumentTypeError as exc:
            raise SystemExit(f"error: DEAD_CODE_GROUP_LIMIT: {exc}") from exc

    verbose = args.verbose or _env_flag(env, "DEAD_CODE_VERBOSE", default=False)
    output = args.out or env.get("DEAD_CODE_OUTPUT")

    return Configuration(
        debug_path=Path(debug),
        release_path=Path(release),
        project_root=project_root,
        demangle=demangle,
        group_limit=group_limit,
        output_path=Path(output) if output else None,
        verbose=verbose,
        source_prefixes=_source_prefixes(args.source_prefix, env),
        include_pods=args.include_pods,
    )


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name, "").strip().lower()
    if not value:
        return default
    return value not in _FALSE_VALUES


def _source_prefixes(explicit: list[str], env: Mapping[str, str]) -> list[str]:
    prefixes = [value for value in explicit if value]
    if prefixes:
        return prefixes
    from_env = env.get("DEAD_CODE_SOURCE_PREFIXES", "")
    if from_env:
        return [value for value in from_env.split(":") if value]

    # Build-script phases list their inputs as SCRIPT_INPUT_FILE_<n>.
    try:
        count = int(env.get("SCRIPT_INPUT_FILE_COUNT", "0"))
    except ValueError:
        return []
    discovered: list[str] = []
    for index in range(count):
        value = env.get(f"SCRIPT_INPUT_FILE_{index}")
        if not value:
            continue
        parent = Path(value).parent.name
        if parent and parent not in discovered:
            discovered.append(parent)
    return discovered


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid numeric value {value!r}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError(f"invalid numeric value {value!r}")
    return number


if __name__ == "__main__":
    raise SystemExit(main())
