"""
Selector Registry.

Parses `--pair-func` and `--assume-pair` specifications into structured keys
and freezes them into an immutable `Registry`.

Rule specifications
-------------------

1. Any method named ``log``, pairs start at 0::

    .log=0

2. The ``wrap`` function of module ``acme.errors``, pairs start at 2::

    acme.errors:wrap=2

3. The ``add_pairs`` method of ``acme.details.Pairs``, pairs start at 0::

    acme.details:Pairs.add_pairs=0

Specifications without a colon follow the dotted grammar
``[pkg[.Type]].<func>=<offset>``, where the package is matched non-greedily,
so ``p.X=1`` is a package function and ``p.T.m=0`` a concrete method.

Whitelist specifications
------------------------

``acme.details.Pairs`` (or ``acme.details:Pairs``) trusts values of that type
to already hold valid pairs.
"""

import re
import sys
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Set, Tuple


class ConfigurationError(ValueError):
  """
  Raised for a malformed rule or whitelist specification.
  """


_RULE_PATTERN = re.compile(r"^(?:(.*?)(?:\.([^./]+))?)?\.([^.]+)=([0-9]+)$")
_QUALIFIED_RULE_PATTERN = re.compile(r"^([^:]+):(?:([^.:=]+)\.)?([^.:=]+)=([0-9]+)$")

_WHITELIST_PATTERN = re.compile(r"^(.*?)\.([^./]+)$")
_QUALIFIED_WHITELIST_PATTERN = re.compile(r"^([^:]+):([^.:]+)$")

_RULE_ERROR = "invalid func offset; should be of form [pkg[.type]].<func>=<offset>"
_WHITELIST_ERROR = "invalid type whitelist; should be of form <pkg>.<type>"


@dataclass(frozen=True)
class Selector:
  """
  Identity key of a rule.

  An empty package and type make a generic-method selector that matches
  any receiver by function name alone.
  """

  function: str
  package: str = ""
  type_name: str = ""

  @property
  def is_generic_method(self) -> bool:
    return not self.package and not self.type_name

  @property
  def is_package_function(self) -> bool:
    return bool(self.package) and not self.type_name

  def __str__(self) -> str:
    if self.is_generic_method:
      return f".{self.function}"
    if self.type_name:
      return f"{self.package}:{self.type_name}.{self.function}"
    return f"{self.package}:{self.function}"


@dataclass(frozen=True)
class TrustedType:
  """A (package, type) pair registered with `--assume-pair`."""

  package: str
  type_name: str

  def __str__(self) -> str:
    return f"{self.package}.{self.type_name}"


def _parse_offset(raw: str) -> int:
  try:
    value = int(raw)
  except ValueError as e:
    raise ConfigurationError(f"invalid func offset {raw!r}: {e}") from e
  if value > sys.maxsize:
    raise ConfigurationError(f"invalid func offset {raw!r}: value out of range")
  return value


def parse_rule(spec: str) -> Tuple[Selector, int]:
  """
  Parses a rule specification into a selector and its offset.

  Args:
      spec: Either ``[pkg[.Type]].func=N`` or ``module:[Type.]func=N``.

  Returns:
      Tuple[Selector, int]: The selector and the number of leading args to skip.

  Raises:
      ConfigurationError: If the spec is malformed or the offset is out of range.
  """
  spec = spec.strip()

  if ":" in spec:
    m = _QUALIFIED_RULE_PATTERN.match(spec)
    if not m:
      raise ConfigurationError(_RULE_ERROR)
    package, type_name, function, raw_offset = m.groups()
  else:
    m = _RULE_PATTERN.match(spec)
    if not m:
      raise ConfigurationError(_RULE_ERROR)
    package, type_name, function, raw_offset = m.groups()

  selector = Selector(function=function, package=package or "", type_name=type_name or "")
  return selector, _parse_offset(raw_offset)


def parse_whitelist(spec: str) -> TrustedType:
  """
  Parses a whitelist specification.

  Args:
      spec: ``pkg.Type`` or ``module:Type``. The type is the final segment.

  Returns:
      TrustedType: The parsed pair.

  Raises:
      ConfigurationError: If there is no separator.
  """
  spec = spec.strip()
  pattern = _QUALIFIED_WHITELIST_PATTERN if ":" in spec else _WHITELIST_PATTERN
  m = pattern.match(spec)
  if not m:
    raise ConfigurationError(_WHITELIST_ERROR)
  return TrustedType(package=m.group(1), type_name=m.group(2))


@dataclass(frozen=True)
class Registry:
  """
  Immutable rule and whitelist tables.

  Built once by `RegistryBuilder.build()` and shared read-only by every
  matcher and validator, across threads.
  """

  rules: Mapping[Selector, int]
  whitelist: FrozenSet[TrustedType]

  def offset_for(self, selector: Selector) -> Optional[int]:
    return self.rules.get(selector)

  def is_trusted(self, package: str, type_name: str) -> bool:
    return TrustedType(package=package, type_name=type_name) in self.whitelist

  @classmethod
  def from_specs(cls, rule_specs: Iterable[str] = (), whitelist_specs: Iterable[str] = ()) -> "Registry":
    """
    Convenience constructor parsing both lists of specifications.

    Raises:
        ConfigurationError: On the first malformed specification.
    """
    builder = RegistryBuilder()
    for spec in rule_specs:
      builder.register_rule(spec)
    for spec in whitelist_specs:
      builder.register_whitelist(spec)
    return builder.build()


class RegistryBuilder:
  """
  Mutable staging area for registrations; the only place tables are written.
  """

  def __init__(self) -> None:
    self._rules: Dict[Selector, int] = {}
    self._whitelist: Set[TrustedType] = set()

  def register_rule(self, spec: str) -> Selector:
    """Parses and registers a rule; re-registration overwrites the offset."""
    selector, offset = parse_rule(spec)
    self._rules[selector] = offset
    return selector

  def register_whitelist(self, spec: str) -> TrustedType:
    trusted = parse_whitelist(spec)
    self._whitelist.add(trusted)
    return trusted

  def build(self) -> Registry:
    return Registry(rules=MappingProxyType(dict(self._rules)), whitelist=frozenset(self._whitelist))
