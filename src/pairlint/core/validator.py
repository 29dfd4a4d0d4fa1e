"""
Pair Validator.

Applies the pair rules to a matched call. The checks run in order and
short-circuit per call:

1.  Nothing after the offset: accept.
2.  A single trusted container after the offset: accept.
3.  Odd number of relevant args: one arity diagnostic.
4.  A trusted container mixed with loose pairs: one mixing diagnostic.
5.  Every key position (even index) must be a string: one diagnostic per bad key.

Value positions are never inspected.
"""

from typing import List, Sequence

from pairlint.core.descriptors import ArgumentDescriptor, CallSiteDescriptor, Position
from pairlint.core.diagnostics import (
  ARITY_MESSAGE,
  CONSTANT_KEY_MESSAGE,
  EXPRESSION_KEY_MESSAGE,
  WHITELIST_MIXING_MESSAGE,
  Diagnostic,
)
from pairlint.core.selectors import Registry
from pairlint.enums import DiagnosticKind, TypeKind


class PairValidator:
  """
  Pure function of a call's static facts and the immutable registry.

  Attributes:
      registry: Supplies the whitelist.
      report_untyped_keys: If True, keys whose type could not be inferred are
          reported as `expression Any`. Otherwise they are given the benefit
          of the doubt.
  """

  def __init__(self, registry: Registry, report_untyped_keys: bool = False):
    self.registry = registry
    self.report_untyped_keys = report_untyped_keys

  def is_whitelisted(self, arg: ArgumentDescriptor) -> bool:
    """
    Checks if an argument's type (or the type behind Optional) is trusted.
    """
    if arg.is_constant:
      return False
    target = arg.static_type.named_target()
    if target is None:
      return False
    return self.registry.is_trusted(target.module, target.type_name)

  def validate(self, call_site: CallSiteDescriptor, offset: int, display_name: str) -> List[Diagnostic]:
    """
    Runs the pair checks on a call already matched to a rule.

    Args:
        call_site: The call and its positional arguments.
        offset: Number of leading arguments excluded from pairing.
        display_name: Callee label for messages.

    Returns:
        List[Diagnostic]: Possibly empty.
    """
    args: Sequence[ArgumentDescriptor] = call_site.arguments
    relevant = args[offset:]

    if not relevant:
      return []

    if len(relevant) == 1 and self.is_whitelisted(relevant[0]):
      return []

    if len(relevant) % 2 != 0:
      return [
        _diagnostic(
          DiagnosticKind.ARITY,
          ARITY_MESSAGE % (len(args), display_name),
          call_site.position,
        )
      ]

    for i, arg in enumerate(relevant):
      if self.is_whitelisted(arg):
        return [
          _diagnostic(
            DiagnosticKind.WHITELIST_MIXING,
            WHITELIST_MIXING_MESSAGE % (i + offset, display_name),
            call_site.position,
          )
        ]

    found: List[Diagnostic] = []
    for i, arg in enumerate(relevant):
      if i % 2 != 0:
        continue
      message = self._check_key(arg, i + offset, display_name)
      if message:
        found.append(_diagnostic(DiagnosticKind.KEY_TYPE, message, arg.position))
    return found

  def _check_key(self, arg: ArgumentDescriptor, index: int, display_name: str) -> str:
    if arg.is_constant:
      if arg.is_string_constant:
        return ""
      return CONSTANT_KEY_MESSAGE % (index, display_name, arg.constant_kind)

    static_type = arg.static_type
    if static_type.is_string:
      # Acceptable, though a constant is preferred
      return ""

    if static_type.kind == TypeKind.DYNAMIC and not self.report_untyped_keys:
      return ""

    return EXPRESSION_KEY_MESSAGE % (index, display_name, static_type.name)


def _diagnostic(kind: DiagnosticKind, message: str, position: Position) -> Diagnostic:
  # Source positions are 0-based columns; reported columns count from 1
  return Diagnostic(kind=kind, message=message, line=position.line, column=position.column + 1)
