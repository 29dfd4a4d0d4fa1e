"""
Expression Typing.

Classifies an argument expression as either a compile-time constant (with its
kind) or a non-constant expression with a shallow `StaticType`.

Constants are literals and the constant folding of literals:

-   `"k"`, `"a" "b"`, `f"plain"` -> constant `str`
-   `b"k"` -> constant `bytes`
-   `1`, `-1`, `1 + 2` -> constant `int`; `1.5` -> `float`; `2j` -> `complex`
-   `True` / `False` -> constant `bool`; `None` -> constant `None`
-   Module constants (see `ModuleIndexer`) -> constant of their kind

Everything else is an expression whose type comes from the scope, from
annotations, or from a handful of well-known builtins.
"""

from dataclasses import dataclass
from typing import Optional

import libcst as cst

from pairlint.analysis.symbol_table import (
  ClassType,
  FunctionType,
  ModuleIndex,
  ModuleType,
  Scope,
  SymbolType,
  ValueType,
  is_class_name,
)
from pairlint.core.descriptors import StaticType
from pairlint.enums import TypeKind

_NUMERIC_ORDER = ["bool", "int", "float", "complex"]

# Builtin callables whose result type is fixed
_BUILTIN_RESULTS = {
  "str": "str",
  "repr": "str",
  "ascii": "str",
  "format": "str",
  "chr": "str",
  "hex": "str",
  "oct": "str",
  "bin": "str",
  "input": "str",
  "int": "int",
  "len": "int",
  "ord": "int",
  "hash": "int",
  "id": "int",
  "float": "float",
  "bool": "bool",
  "isinstance": "bool",
  "callable": "bool",
  "bytes": "bytes",
  "complex": "complex",
}

_STR_METHODS = {
  "capitalize",
  "casefold",
  "center",
  "expandtabs",
  "format",
  "format_map",
  "join",
  "ljust",
  "lower",
  "lstrip",
  "removeprefix",
  "removesuffix",
  "replace",
  "rjust",
  "rstrip",
  "strip",
  "swapcase",
  "title",
  "translate",
  "upper",
  "zfill",
}

_DISPLAY_TYPES = {
  cst.List: "list",
  cst.ListComp: "list",
  cst.Dict: "dict",
  cst.DictComp: "dict",
  cst.Set: "set",
  cst.SetComp: "set",
  cst.Tuple: "tuple",
  cst.GeneratorExp: "Generator",
  cst.Lambda: "Callable",
}


@dataclass(frozen=True)
class ExprInfo:
  """
  Result of classifying an expression.

  For constants `static_type` is the builtin type of the constant.
  """

  static_type: StaticType
  constant_kind: Optional[str] = None

  @property
  def is_constant(self) -> bool:
    return self.constant_kind is not None

  @classmethod
  def constant(cls, kind: str) -> "ExprInfo":
    return cls(static_type=StaticType.basic(kind), constant_kind=kind)

  @classmethod
  def of(cls, static_type: StaticType) -> "ExprInfo":
    return cls(static_type=static_type)

  @classmethod
  def dynamic(cls) -> "ExprInfo":
    return cls(static_type=StaticType.dynamic())


def _promote(a: str, b: str) -> Optional[str]:
  """Result kind of arithmetic between two numeric kinds."""
  if a not in _NUMERIC_ORDER or b not in _NUMERIC_ORDER:
    return None
  kind = _NUMERIC_ORDER[max(_NUMERIC_ORDER.index(a), _NUMERIC_ORDER.index(b))]
  return "int" if kind == "bool" else kind


class ExpressionTyper:
  """
  Stateless classifier bound to a scope.

  Attributes:
      scope: Names visible at the expression.
      index: Module declarations, used to look up local class members.
  """

  def __init__(self, scope: Scope, index: ModuleIndex):
    self.scope = scope
    self.index = index

  # --- Symbols ---

  def resolve_symbol(self, node: cst.BaseExpression) -> Optional[SymbolType]:
    """
    Resolves a Name or Attribute chain to the symbol it denotes.

    `mod.sub` resolves to Module('mod.sub'), `mod.Cls` to a class, `Enum.MEMBER`
    and `obj.field` to values when the owning class is known.
    """
    if isinstance(node, cst.Name):
      return self.scope.get(node.value)

    if not isinstance(node, cst.Attribute):
      return None

    base = self.resolve_symbol(node.value)
    attr = node.attr.value

    if isinstance(base, ModuleType):
      if is_class_name(attr):
        if base.path == self.index.module and attr in self.index.classes:
          return self.index.classes[attr]
        return ClassType(name=attr, module=base.path)
      return ModuleType(name="module", path=f"{base.path}.{attr}")

    if isinstance(base, ClassType):
      if attr in base.attributes:
        return base.attributes[attr]
      if attr in base.methods:
        return base.methods[attr]
      return None

    if isinstance(base, ValueType):
      cls = self.index.lookup_class(base.static_type)
      if cls is not None:
        if attr in cls.attributes:
          member = cls.attributes[attr]
          # Instance access never yields a compile-time constant
          return ValueType(name=attr, static_type=member.static_type)
        if attr in cls.methods:
          return cls.methods[attr]
    return None

  # --- Classification ---

  def describe(self, node: cst.BaseExpression) -> ExprInfo:
    """
    Classifies an expression.

    Args:
        node: Any CST expression.

    Returns:
        ExprInfo: Constant kind, or static type of the expression.
    """
    if isinstance(node, cst.SimpleString):
      return ExprInfo.constant("bytes" if "b" in node.prefix.lower() else "str")

    if isinstance(node, cst.FormattedString):
      has_fields = any(isinstance(p, cst.FormattedStringExpression) for p in node.parts)
      return ExprInfo.of(StaticType.basic("str")) if has_fields else ExprInfo.constant("str")

    if isinstance(node, cst.ConcatenatedString):
      left = self.describe(node.left)
      right = self.describe(node.right)
      if left.is_constant and right.is_constant:
        return left
      return ExprInfo.of(left.static_type)

    if isinstance(node, cst.Integer):
      return ExprInfo.constant("int")
    if isinstance(node, cst.Float):
      return ExprInfo.constant("float")
    if isinstance(node, cst.Imaginary):
      return ExprInfo.constant("complex")

    if isinstance(node, cst.Name):
      if node.value in ("True", "False"):
        return ExprInfo.constant("bool")
      if node.value == "None":
        return ExprInfo.constant("None")

    for display, name in _DISPLAY_TYPES.items():
      if isinstance(node, display):
        return ExprInfo.of(StaticType.other(name))

    if isinstance(node, cst.UnaryOperation):
      return self._describe_unary(node)
    if isinstance(node, cst.BinaryOperation):
      return self._describe_binary(node)
    if isinstance(node, cst.Comparison):
      return ExprInfo.of(StaticType.basic("bool"))
    if isinstance(node, cst.IfExp):
      body = self.describe(node.body).static_type
      orelse = self.describe(node.orelse).static_type
      return ExprInfo.of(body) if body == orelse else ExprInfo.dynamic()
    if isinstance(node, cst.Call):
      return self._describe_call(node)

    if isinstance(node, (cst.Name, cst.Attribute)):
      return self._describe_symbol(self.resolve_symbol(node))

    return ExprInfo.dynamic()

  def _describe_symbol(self, sym: Optional[SymbolType]) -> ExprInfo:
    if isinstance(sym, ValueType):
      if sym.constant_kind is not None:
        return ExprInfo.constant(sym.constant_kind)
      return ExprInfo.of(sym.static_type)
    if isinstance(sym, ClassType):
      return ExprInfo.of(StaticType.other(f"type[{sym.instance().name}]"))
    if isinstance(sym, FunctionType):
      return ExprInfo.of(StaticType.other("Callable"))
    if isinstance(sym, ModuleType) and sym.is_import:
      return ExprInfo.of(StaticType.other("module"))
    # Imported members and module attributes have no inferred type
    return ExprInfo.dynamic()

  def _describe_unary(self, node: cst.UnaryOperation) -> ExprInfo:
    operand = self.describe(node.expression)
    if isinstance(node.operator, cst.Not):
      return ExprInfo.constant("bool") if operand.is_constant else ExprInfo.of(StaticType.basic("bool"))
    kind = _promote(operand.static_type.name, "bool") if operand.static_type.kind == TypeKind.BASIC else None
    if kind is None:
      return ExprInfo.dynamic()
    return ExprInfo.constant(kind) if operand.is_constant else ExprInfo.of(StaticType.basic(kind))

  def _describe_binary(self, node: cst.BinaryOperation) -> ExprInfo:
    left = self.describe(node.left)
    right = self.describe(node.right)
    both_constant = left.is_constant and right.is_constant
    lt, rt = left.static_type, right.static_type

    if isinstance(node.operator, cst.Modulo) and lt.is_string:
      # printf-style formatting
      return ExprInfo.of(StaticType.basic("str"))

    if isinstance(node.operator, cst.Add) and lt.is_string and rt.is_string:
      return ExprInfo.constant("str") if both_constant else ExprInfo.of(StaticType.basic("str"))

    if isinstance(node.operator, cst.Multiply) and {lt.name, rt.name} == {"str", "int"}:
      return ExprInfo.constant("str") if both_constant else ExprInfo.of(StaticType.basic("str"))

    if lt.kind == TypeKind.BASIC and rt.kind == TypeKind.BASIC:
      kind = _promote(lt.name, rt.name)
      if kind is not None:
        if isinstance(node.operator, cst.Divide):
          kind = "complex" if kind == "complex" else "float"
        return ExprInfo.constant(kind) if both_constant else ExprInfo.of(StaticType.basic(kind))

    return ExprInfo.dynamic()

  def _describe_call(self, node: cst.Call) -> ExprInfo:
    func = node.func

    if isinstance(func, cst.Name) and self.scope.get(func.value) is None and func.value in _BUILTIN_RESULTS:
      return ExprInfo.of(StaticType.basic(_BUILTIN_RESULTS[func.value]))

    if isinstance(func, cst.Attribute):
      receiver = self.describe(func.value).static_type
      if receiver.is_string and func.attr.value in _STR_METHODS:
        return ExprInfo.of(StaticType.basic("str"))

    callee = self.resolve_symbol(func)
    if isinstance(callee, ClassType):
      return ExprInfo.of(callee.instance())
    if isinstance(callee, FunctionType) and callee.returns is not None:
      return ExprInfo.of(callee.returns)

    return ExprInfo.dynamic()
