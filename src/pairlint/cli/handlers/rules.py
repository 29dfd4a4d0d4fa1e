"""
Rules Command Handler.

Parses the configured specifications and prints the resulting registry,
which doubles as a configuration check.
"""

from rich.markup import escape
from rich.table import Table

from pairlint.config import LintConfig
from pairlint.core.selectors import ConfigurationError
from pairlint.utils.console import console, log_error


def _shape(selector) -> str:
  if selector.is_generic_method:
    return "any method"
  if selector.is_package_function:
    return "function"
  return "method"


def handle_rules(config: LintConfig) -> int:
  """
  Prints the rule and whitelist tables.

  Args:
      config: Resolved configuration.

  Returns:
      int: 0 on success, 1 if a specification is malformed.
  """
  try:
    registry = config.build_registry()
  except ConfigurationError as e:
    log_error(escape(str(e)))
    return 1

  rules = Table(title="Pair Functions")
  rules.add_column("Spec", style="bold")
  rules.add_column("Kind", style="cyan")
  rules.add_column("Package", style="dim")
  rules.add_column("Type")
  rules.add_column("Function")
  rules.add_column("Offset", justify="right", style="magenta")

  ordered = sorted(registry.rules.items(), key=lambda kv: (kv[0].package, kv[0].type_name, kv[0].function))
  for selector, offset in ordered:
    rules.add_row(
      str(selector), _shape(selector), selector.package or "*", selector.type_name or "*", selector.function, str(offset)
    )

  console.print(rules)

  if registry.whitelist:
    trusted = Table(title="Assumed Pair Types")
    trusted.add_column("Spec", style="bold")
    trusted.add_column("Package", style="dim")
    trusted.add_column("Type", style="green")
    for entry in sorted(registry.whitelist, key=lambda t: (t.package, t.type_name)):
      trusted.add_row(str(entry), entry.package, entry.type_name)
    console.print(trusted)

  return 0
