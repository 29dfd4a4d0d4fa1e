"""
CLI Command Handlers Facade.

Re-exports handlers from `pairlint.cli.handlers` so the dispatcher (and tests)
have a single patch point.
"""

from pairlint.cli.handlers.check import handle_check
from pairlint.cli.handlers.rules import handle_rules

__all__ = [
  "handle_check",
  "handle_rules",
]
