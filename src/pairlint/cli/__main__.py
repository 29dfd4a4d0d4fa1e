"""
Main Entry Point for pairlint CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `pairlint.cli.commands`.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from rich.markup import escape

from pairlint.cli import commands
from pairlint.config import LintConfig
from pairlint.core.selectors import ConfigurationError
from pairlint.utils.console import log_error, set_verbose
from pairlint import __version__


def _add_config_flags(cmd: argparse.ArgumentParser) -> None:
  cmd.add_argument(
    "--pair-func",
    dest="pair_funcs",
    action="append",
    default=[],
    metavar="SPEC",
    help="Validate this func, e.g. '.log=0', 'acme.errors:wrap=2' (repeatable)",
  )
  cmd.add_argument(
    "--assume-pair",
    dest="assume_pairs",
    action="append",
    default=[],
    metavar="TYPE",
    help="Assume this type already holds valid pairs, e.g. 'acme.details.Pairs' (repeatable)",
  )
  cmd.add_argument(
    "--report-untyped-keys",
    action="store_true",
    default=None,
    help="Report keys whose type could not be inferred (Overrides config)",
  )
  cmd.add_argument(
    "--strict-receivers",
    action="store_true",
    help="Only match methods on receivers with an inferred class",
  )


def _resolve_config(args: argparse.Namespace, jobs: Optional[int] = None) -> LintConfig:
  return LintConfig.load(
    pair_funcs=args.pair_funcs,
    assume_pairs=args.assume_pairs,
    report_untyped_keys=args.report_untyped_keys,
    dynamic_receivers=False if args.strict_receivers else None,
    jobs=jobs,
  )


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 clean, 1 failure, 3 diagnostics reported).
  """
  parser = argparse.ArgumentParser(description="pairlint: key/value pair argument checker")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: CHECK ---
  cmd_check = subparsers.add_parser("check", help="Check Python files for malformed key/value pairs")
  cmd_check.add_argument("paths", nargs="+", type=Path, help="Input source files or directories")
  cmd_check.add_argument("--format", choices=["text", "json"], default="text", help="Output format (default: text)")
  cmd_check.add_argument("--jobs", "-j", type=int, default=None, help="Worker threads (default: from toml, else 1)")
  _add_config_flags(cmd_check)

  # --- Command: RULES ---
  cmd_rules = subparsers.add_parser("rules", help="Show the parsed rule and whitelist tables")
  _add_config_flags(cmd_rules)

  args = parser.parse_args(argv)
  set_verbose(args.verbose)

  try:
    config = _resolve_config(args, jobs=getattr(args, "jobs", None))
  except ConfigurationError as e:
    log_error(escape(str(e)))
    return 1

  if args.command == "check":
    return commands.handle_check(args.paths, config, args.format)

  elif args.command == "rules":
    return commands.handle_rules(config)

  return 0


if __name__ == "__main__":
  sys.exit(main())
