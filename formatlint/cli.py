"""formatlint/cli.py — command-line entry point.

Usage examples
--------------
    # Lint C# sources (files or directories)
    formatlint check src/ --output gcc

    # Lint and emit one JSON object per diagnostic
    formatlint check Program.cs --output json --suppress S3457

    # Validate a single template against argument labels
    formatlint template "{0} {2}" a b c

    # ... or against one array argument with three elements
    formatlint template "{0}{1}{2}" --array 3

Exit codes
----------
    0   Success (no error-severity diagnostics / template valid).
    1   One or more error-severity diagnostics / template invalid.
    2   Infrastructure failure (missing file, bad configuration, ...).
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from formatlint import __version__
from formatlint.config import OUTPUT_FORMATS, LintConfig
from formatlint.errors import FormatLintError
from formatlint.model import UNKNOWN_ARRAY_SIZE, FormatArgument
from formatlint.rule import rule_for
from formatlint.runner import lint_paths
from formatlint.validator import validate_format_call

_log = logging.getLogger("formatlint")

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


def _configure_logging(verbosity: int) -> None:
    """Set up the ``formatlint`` logger.

    0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("formatlint")
    root.setLevel(level)
    root.handlers[:] = [handler]


def _load_config(args: argparse.Namespace) -> LintConfig:
    if args.config:
        config = LintConfig.load(args.config)
    else:
        config = LintConfig.discover()
    suppress = list(config.suppress) + list(args.suppress or [])
    return config.merged(
        output=args.output,
        suppress=suppress,
        report_trivial_only_for_format=False if args.all_trivial else None,
    )


def _cmd_check(args: argparse.Namespace) -> int:
    config = _load_config(args)
    results = lint_paths(args.paths, config)

    if config.output == "json":
        text = results.to_json_lines()
    elif config.output == "gcc":
        text = results.to_gcc_format()
    else:
        text = results.summary()
    if text:
        sys.stdout.write(text + "\n")

    return EXIT_ERROR if results.error_count > 0 else EXIT_OK


def _cmd_template(args: argparse.Namespace) -> int:
    if args.array is not None:
        if args.array < UNKNOWN_ARRAY_SIZE:
            _log.error("--array must be %d or larger", UNKNOWN_ARRAY_SIZE)
            return EXIT_INFRA
        arguments = [FormatArgument.array("args", args.array)]
    else:
        arguments = [FormatArgument.scalar(label) for label in args.arguments]

    failure = validate_format_call(args.template, arguments)
    if failure is None:
        sys.stdout.write("ok\n")
        return EXIT_OK

    error_id, severity = rule_for(failure)
    sys.stdout.write(
        f"{severity.value}: {failure.message} [{error_id}, {failure.bucket.value}]\n")
    return EXIT_ERROR


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formatlint",
        description="Validate composite format strings ('{0,-5:N2}') "
                    "against their arguments.",
    )
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="-v for progress, -vv for debug output")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="lint C# files or directories")
    check.add_argument("paths", nargs="+", help="files or directories")
    check.add_argument("--output", choices=OUTPUT_FORMATS, default=None,
                       help="output format (default: gcc)")
    check.add_argument("--suppress", nargs="*", default=None, metavar="ID",
                       help="rule ids to suppress")
    check.add_argument("--config", default=None,
                       help="JSON configuration file (default: ./.formatlint.json)")
    check.add_argument("--all-trivial", action="store_true",
                       help="report trivial templates for every tracked method")
    check.set_defaults(func=_cmd_check)

    template = sub.add_parser("template", help="validate a single template")
    template.add_argument("template")
    template.add_argument("arguments", nargs="*", metavar="ARG",
                          help="argument labels, in order")
    template.add_argument("--array", type=int, default=None, metavar="SIZE",
                          help=f"pass one array argument of SIZE elements "
                               f"({UNKNOWN_ARRAY_SIZE} = unknown)")
    template.set_defaults(func=_cmd_template)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        return args.func(args)
    except (FormatLintError, OSError) as exc:
        _log.error("%s", exc)
        return EXIT_INFRA


__all__: List[str] = ["main", "build_parser"]
