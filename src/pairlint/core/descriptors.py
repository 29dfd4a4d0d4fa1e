"""
Call-site and argument descriptors.

These are the contract between the front end (which knows about syntax
trees and types) and the core (which only knows about rules). They are
produced fresh per call expression and discarded after validation.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from pairlint.enums import CallKind, TypeKind


@dataclass(frozen=True)
class StaticType:
  """
  A shallow static type.

  `name` is the display text used in diagnostics (e.g. `int`,
  `acme.details.Pairs`, `Optional[acme.details.Pairs]`).
  """

  kind: TypeKind
  name: str
  module: str = ""
  underlying: Optional[str] = None
  """Builtin representation of a NAMED type (e.g. `str` for `class Key(str)`)."""
  elem: Optional["StaticType"] = None
  """Wrapped type of a POINTER."""

  @classmethod
  def basic(cls, name: str) -> "StaticType":
    return cls(kind=TypeKind.BASIC, name=name, module="builtins", underlying=name)

  @classmethod
  def named(cls, module: str, name: str, underlying: Optional[str] = None) -> "StaticType":
    display = f"{module}.{name}" if module else name
    return cls(kind=TypeKind.NAMED, name=display, module=module, underlying=underlying)

  @classmethod
  def pointer(cls, elem: "StaticType") -> "StaticType":
    return cls(kind=TypeKind.POINTER, name=f"Optional[{elem.name}]", elem=elem)

  @classmethod
  def dynamic(cls) -> "StaticType":
    return cls(kind=TypeKind.DYNAMIC, name="Any")

  @classmethod
  def other(cls, name: str) -> "StaticType":
    return cls(kind=TypeKind.OTHER, name=name)

  @property
  def type_name(self) -> str:
    """Bare class name of a NAMED type."""
    if self.module and self.name.startswith(self.module + "."):
      return self.name[len(self.module) + 1 :]
    return self.name

  @property
  def is_string(self) -> bool:
    """True if the underlying representation is the `str` primitive."""
    if self.kind in (TypeKind.BASIC, TypeKind.NAMED):
      return self.underlying == "str"
    return False

  def named_target(self) -> Optional["StaticType"]:
    """
    Unwraps a direct named type or a pointer to a named type.

    Returns:
        The NAMED type, or None for anything else.
    """
    if self.kind == TypeKind.NAMED:
      return self
    if self.kind == TypeKind.POINTER and self.elem is not None and self.elem.kind == TypeKind.NAMED:
      return self.elem
    return None


@dataclass(frozen=True)
class Position:
  """1-based line and 0-based column, as LibCST reports them."""

  line: int = 0
  column: int = 0


@dataclass(frozen=True)
class ArgumentDescriptor:
  """
  Static facts about one positional argument.

  Exactly one of `constant_kind` (constants) or `static_type`
  (expressions) is meaningful.
  """

  index: int
  is_constant: bool
  constant_kind: Optional[str] = None
  static_type: StaticType = field(default_factory=StaticType.dynamic)
  position: Position = field(default_factory=Position)

  @classmethod
  def constant(cls, index: int, kind: str, position: Optional[Position] = None) -> "ArgumentDescriptor":
    return cls(
      index=index,
      is_constant=True,
      constant_kind=kind,
      static_type=StaticType.basic(kind),
      position=position or Position(),
    )

  @classmethod
  def expression(cls, index: int, static_type: StaticType, position: Optional[Position] = None) -> "ArgumentDescriptor":
    return cls(index=index, is_constant=False, static_type=static_type, position=position or Position())

  @property
  def is_string_constant(self) -> bool:
    return self.is_constant and self.constant_kind == "str"


@dataclass(frozen=True)
class CallSiteDescriptor:
  """
  Resolved identity of a call expression plus its positional arguments.

  For METHOD calls `receiver` holds the receiver's static type; for
  FUNCTION calls `package` holds the defining module path.
  """

  kind: CallKind
  function: str
  package: str = ""
  receiver: Optional[StaticType] = None
  arguments: Tuple[ArgumentDescriptor, ...] = ()
  position: Position = field(default_factory=Position)
  parameters: Optional[str] = None
  """Parameter shape of the callee (`*inputs`), when its definition was seen."""
