"""
Check Command Handler.

Lints files or directories and reports key/value pair diagnostics.

Exit codes follow the analysis-driver convention:

-   0: no diagnostics.
-   1: configuration error, missing path, or files that could not be parsed.
-   3: diagnostics were reported.
"""

import json
from pathlib import Path
from typing import List

from rich.markup import escape

from pairlint.config import LintConfig
from pairlint.core.engine import LintResult, PairsEngine
from pairlint.core.selectors import ConfigurationError
from pairlint.utils.console import console, log_error, log_info, log_success, log_warning

EXIT_CLEAN = 0
EXIT_FAILURE = 1
EXIT_DIAGNOSTICS = 3


def _print_text(results: List[LintResult]) -> None:
  for result in results:
    for diagnostic in result.diagnostics:
      location, _, message = diagnostic.format().partition(": ")
      console.print(f"[diagnostic.location]{escape(location)}[/]: {escape(message)}", highlight=False, soft_wrap=True)


def _print_json(results: List[LintResult]) -> None:
  payload = [
    {
      "path": d.path,
      "line": d.line,
      "column": d.column,
      "kind": d.kind.value,
      "message": d.message,
    }
    for result in results
    for d in result.diagnostics
  ]
  # Pure JSON to stdout, bypassing rich formatting
  print(json.dumps(payload, indent=2))


def handle_check(paths: List[Path], config: LintConfig, output_format: str = "text") -> int:
  """
  Runs the linter over `paths`.

  Args:
      paths: Files or directories to lint.
      config: Resolved configuration.
      output_format: "text" (one line per diagnostic) or "json".

  Returns:
      int: Exit code.
  """
  try:
    engine = PairsEngine.from_config(config)
  except ConfigurationError as e:
    log_error(escape(str(e)))
    return EXIT_FAILURE

  missing = [p for p in paths if not p.exists()]
  if missing:
    for p in missing:
      log_error(f"Path not found: {escape(str(p))}")
    return EXIT_FAILURE

  if not config.pair_funcs:
    log_warning("No pair functions configured; nothing to check. Use --pair-func or [tool.pairlint].")

  json_mode = output_format == "json"
  results = engine.lint_paths(paths)

  if not json_mode:
    log_info(f"Checked {len(results)} file(s) against {len(engine.registry.rules)} rule(s).")

  for result in results:
    for error in result.errors:
      log_error(f"{escape(result.path or result.module)}: {escape(error)}")

  if json_mode:
    _print_json(results)
  else:
    _print_text(results)

  count = sum(len(r.diagnostics) for r in results)
  if any(r.has_errors for r in results):
    return EXIT_FAILURE
  if count:
    return EXIT_DIAGNOSTICS

  if not json_mode:
    log_success("No key/value pair problems found.")
  return EXIT_CLEAN
