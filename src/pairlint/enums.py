"""
Enumerations for pairlint.

This module defines the standard enumerations shared by the front end,
the matcher and the validator.
"""

from enum import Enum


class CallKind(str, Enum):
  """
  How a call expression resolved.
  """

  FUNCTION = "function"  # module-level function, e.g. `errors.wrap(...)`
  METHOD = "method"  # attribute call on a receiver, e.g. `log.info(...)`


class TypeKind(str, Enum):
  """
  Shape of a statically inferred type.

  Used by the whitelist lookup (NAMED / POINTER) and by key validation
  (BASIC `str`, or NAMED with a `str` underlying type).
  """

  BASIC = "basic"  # builtin primitive: str, int, float, ...
  NAMED = "named"  # a class: module path + class name
  POINTER = "pointer"  # Optional[T]; elem is T
  DYNAMIC = "dynamic"  # not inferable
  OTHER = "other"  # known but not interesting (list, dict, lambda, unions)


class DiagnosticKind(str, Enum):
  """
  Categories of per-call diagnostics.
  """

  ARITY = "ArityViolation"
  KEY_TYPE = "KeyTypeViolation"
  WHITELIST_MIXING = "WhitelistMixingViolation"
