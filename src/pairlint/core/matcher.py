"""
Call Matcher.

Decides whether a call site is subject to pair validation and, if so, at
which offset pairs begin. Lookup is a deterministic two-stage probe:

1.  **Package function**: `(package, function)` only; no fallback.
2.  **Method**: the generic selector `.function` first (any receiver),
    then the concrete `(receiver package, receiver type, function)`.
"""

from dataclasses import dataclass
from typing import Optional

from pairlint.core.descriptors import CallSiteDescriptor, StaticType
from pairlint.core.selectors import Registry, Selector
from pairlint.enums import CallKind, TypeKind


@dataclass(frozen=True)
class MatchResult:
  offset: int
  display_name: str


def describe_method(receiver: StaticType, function: str, parameters: Optional[str]) -> str:
  """
  Builds the display label of a method callee.

  Args:
      receiver: Static type of the receiver.
      function: Method name.
      parameters: Parameter shape (without `self`), or None if unknown.

  Returns:
      str: e.g. `method (acme.log.Logger) log(*inputs)`.
  """
  shape = parameters if parameters is not None else "..."
  return f"method ({receiver.name}) {function}({shape})"


class CallMatcher:
  """
  Resolves call sites against an immutable `Registry`.

  Attributes:
      registry: The rule tables.
      dynamic_receivers: If True, receivers without an inferred type may still
          match generic-method selectors. Concrete selectors always need a
          named receiver.
  """

  def __init__(self, registry: Registry, dynamic_receivers: bool = True):
    self.registry = registry
    self.dynamic_receivers = dynamic_receivers

  def match(self, call_site: CallSiteDescriptor) -> Optional[MatchResult]:
    """
    Finds the rule governing a call site.

    Args:
        call_site: The resolved call.

    Returns:
        MatchResult with the offset and callee label, or None if no rule applies.
    """
    if call_site.kind == CallKind.FUNCTION:
      return self._match_function(call_site)
    return self._match_method(call_site)

  def _match_function(self, call_site: CallSiteDescriptor) -> Optional[MatchResult]:
    offset = self.registry.offset_for(Selector(function=call_site.function, package=call_site.package))
    if offset is None:
      return None
    return MatchResult(offset=offset, display_name=f"{call_site.package}.{call_site.function}")

  def _match_method(self, call_site: CallSiteDescriptor) -> Optional[MatchResult]:
    receiver = call_site.receiver
    if receiver is None:
      return None

    if receiver.kind == TypeKind.DYNAMIC:
      if not self.dynamic_receivers:
        return None
    else:
      # Literals, lambdas and other unnamed values cannot carry a registered method
      receiver = receiver.named_target()
      if receiver is None:
        return None

    # Generic selector wins over the concrete one
    offset = self.registry.offset_for(Selector(function=call_site.function))

    if offset is None and receiver.kind == TypeKind.NAMED:
      concrete = Selector(function=call_site.function, package=receiver.module, type_name=receiver.type_name)
      offset = self.registry.offset_for(concrete)

    if offset is None:
      return None

    return MatchResult(
      offset=offset,
      display_name=describe_method(receiver, call_site.function, call_site.parameters),
    )
