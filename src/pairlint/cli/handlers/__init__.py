"""
Command Handlers.

One module per subcommand, each exposing a ``handle_*`` function that takes
the resolved `LintConfig` and returns the process exit code.

Modules:
    - ``check``: Lints paths and prints diagnostics as text or JSON.
    - ``rules``: Prints the parsed rule and whitelist tables.
"""

from .check import handle_check
from .rules import handle_rules

__all__ = [
  "handle_check",
  "handle_rules",
]
