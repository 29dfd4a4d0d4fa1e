"""
Diagnostic model and sinks.

The message templates in this module are the externally observed contract
of the linter; tests and downstream tooling match on them verbatim.
"""

import threading
from typing import List, Optional, Protocol

from pydantic import BaseModel, Field

from pairlint.enums import DiagnosticKind

ARITY_MESSAGE = "%d args passed to %s; must be even"
CONSTANT_KEY_MESSAGE = "arg %d to %s is constant %s but should be a constant string"
EXPRESSION_KEY_MESSAGE = "arg %d to %s is expression %s but should be a constant string"
WHITELIST_MIXING_MESSAGE = "arg %d to %s is a whitelisted type; should pass one or none"


class Diagnostic(BaseModel):
  """
  A single finding, positioned at a call or at one of its arguments.
  """

  kind: DiagnosticKind = Field(..., description="Violation category.")
  message: str = Field(..., description="Human readable message.")
  line: int = Field(0, description="1-based line of the offending node.")
  column: int = Field(0, description="1-based column of the offending node.")
  path: Optional[str] = Field(None, description="Source file, when known.")

  def format(self) -> str:
    """Renders as `path:line:col: message`."""
    location = f"{self.path or '<string>'}:{self.line}:{self.column}"
    return f"{location}: {self.message}"


class DiagnosticSink(Protocol):
  """Anything diagnostics can be reported to."""

  def report(self, diagnostic: Diagnostic) -> None: ...


class CollectingSink:
  """
  In-memory sink. Safe to share between worker threads.
  """

  def __init__(self) -> None:
    self._lock = threading.Lock()
    self._items: List[Diagnostic] = []

  def report(self, diagnostic: Diagnostic) -> None:
    with self._lock:
      self._items.append(diagnostic)

  @property
  def diagnostics(self) -> List[Diagnostic]:
    with self._lock:
      return sorted(self._items, key=lambda d: (d.path or "", d.line, d.column))
