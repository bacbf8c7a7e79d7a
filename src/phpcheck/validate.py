from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from .config import CheckerConfig, load_config
from .discovery import SourceCandidate, discover_sources
from .errors import ConfigError
from .report import ValidationResult, validate_all, write_validation_index

LOGGER = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check PHP sources for syntax errors without running them.")
    parser.add_argument(
        "paths",
        nargs="*",
        default=["."],
        help="Files or directories to check (default: current directory).",
    )
    parser.add_argument("--config", default=None, help="YAML config file (default: $PHPCHECK_CONFIG).")
    parser.add_argument("--out", default=None, help="Write index.json into this directory.")
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print a validation summary to stdout.",
    )
    parser.add_argument(
        "--no-external",
        action="store_true",
        help="Never call the php binary; use the bundled grammar only.",
    )
    parser.add_argument("--timeout", type=float, default=None, help="php -l timeout in seconds.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING).")
    return parser.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> CheckerConfig:
    config = load_config(args.config)
    if args.no_external:
        config = replace(config, external_enabled=False)
    if args.timeout is not None:
        if args.timeout <= 0:
            raise ConfigError("--timeout must be > 0.")
        config = replace(config, timeout_seconds=args.timeout)
    return config


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = _resolve_config(args)
    except ConfigError as exc:
        LOGGER.error(str(exc))
        return 2

    candidates: list[SourceCandidate] = []
    for raw in args.paths:
        found = discover_sources(Path(raw), config.include)
        if not found:
            LOGGER.warning("no sources found under %s", raw)
        candidates.extend(found)

    results = validate_all(candidates, config)
    valid = sum(result.status == "VALID" for result in results)
    invalid = len(results) - valid
    print(f"files_found={len(results)} valid={valid} invalid={invalid}")
    for result in results:
        if result.status == "INVALID":
            print(f"invalid:{result.path}:{result.line}: {result.kind} {result.message}")
    if args.summary:
        _print_summary(results)
    if args.out:
        dest = write_validation_index(results, Path(args.out))
        LOGGER.info("wrote %s", dest)
    return 0 if invalid == 0 else 1


def _print_summary(results: list[ValidationResult]) -> None:
    kind_counts: dict[str, int] = {}
    for result in results:
        if result.kind is not None:
            kind_counts[result.kind] = kind_counts.get(result.kind, 0) + 1

    print("summary:")
    print(f"  total_files={len(results)}")
    print(f"  total_valid={sum(result.status == 'VALID' for result in results)}")
    print(f"  total_invalid={sum(result.status == 'INVALID' for result in results)}")
    print("  kinds:")
    if kind_counts:
        for kind, count in sorted(kind_counts.items(), key=lambda item: (-item[1], item[0])):
            print(f"    {kind}: {count}")
    else:
        print("    (none)")


if __name__ == "__main__":
    raise SystemExit(main())
