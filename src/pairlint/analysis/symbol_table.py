"""
Symbol Table and Annotation Resolution.

This module provides the symbol model used by the front end to give names a
shallow static meaning before call sites are inspected:

1.  **Symbols**: `ModuleType`, `ClassType`, `FunctionType` and `ValueType`.
2.  **Scopes**: Nested name lookup; class bodies are hidden from their methods.
3.  **Annotations**: `AnnotationResolver` maps annotations to `StaticType`.
4.  **Imports**: Binding helpers shared by both analysis passes.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import libcst as cst

from pairlint.core.descriptors import StaticType

BUILTIN_TYPES = {"str", "int", "float", "bool", "bytes", "complex"}
STRING_BASES = {"str", "StrEnum", "enum.StrEnum", "builtins.str"}
ENUM_BASES = {"Enum", "StrEnum", "IntEnum", "Flag", "IntFlag"}
_CONSTANT_NAME = re.compile(r"^_*[A-Z][A-Z0-9_]*$")


def get_full_name(node: cst.CSTNode) -> str:
  """
  Flattens a Name / Attribute chain into a dotted string.

  Returns:
      str: e.g. "acme.log". Empty for any other node shape.
  """
  if isinstance(node, cst.Name):
    return node.value
  elif isinstance(node, cst.Attribute):
    base = get_full_name(node.value)
    return f"{base}.{node.attr.value}" if base else ""
  return ""


def node_code(node: cst.CSTNode) -> str:
  """Renders a node back to source text."""
  return cst.Module(body=[]).code_for_node(node).strip()


def is_class_name(name: str) -> bool:
  """CapWords names are taken to be classes."""
  return bool(name) and name[0].isupper() and not _CONSTANT_NAME.match(name)


def is_constant_name(name: str) -> bool:
  return bool(_CONSTANT_NAME.match(name))


@dataclass
class SymbolType:
  """
  Base class for symbols bound in a scope.
  """

  name: str

  def __str__(self) -> str:
    return self.name


@dataclass
class ModuleType(SymbolType):
  """
  An imported module, or a lowercase name imported from one.

  Only names bound by `import x` are known to be modules; `from x import y`
  and `x.y` may denote any member of `x`.
  """

  path: str
  """Fully qualified path string (e.g. "acme.log")."""
  is_import: bool = False


@dataclass
class FunctionType(SymbolType):
  """
  A function definition (or method).
  """

  module: str
  parameters: Optional[str] = None
  """Display shape of the parameters, without `self`/`cls`."""
  returns: Optional[StaticType] = None


@dataclass
class ClassType(SymbolType):
  """
  A class object.
  """

  module: str
  underlying: Optional[str] = None
  is_enum: bool = False
  methods: Dict[str, FunctionType] = field(default_factory=dict)
  attributes: Dict[str, "ValueType"] = field(default_factory=dict)

  def instance(self) -> StaticType:
    """The static type of instances of this class."""
    return StaticType.named(self.module, self.name, self.underlying)


@dataclass
class ValueType(SymbolType):
  """
  A variable. `constant_kind` is set for names bound to a compile-time constant.
  """

  static_type: StaticType = field(default_factory=StaticType.dynamic)
  constant_kind: Optional[str] = None


class Scope:
  """
  Represents a variable scope (Module, Class, or Function).
  """

  def __init__(self, parent: Optional["Scope"] = None, name: str = "<root>", is_class: bool = False):
    """
    Initialize the scope.

    Args:
        parent: The enclosing scope (None for the module).
        name: Debug name for the scope.
        is_class: Class bodies are not visible to nested functions.
    """
    self.parent = parent
    self.name = name
    self.is_class = is_class
    self.symbols: Dict[str, SymbolType] = {}

  def set(self, name: str, sym_type: SymbolType) -> None:
    self.symbols[name] = sym_type

  def get(self, name: str) -> Optional[SymbolType]:
    """
    Resolve a symbol, traversing parent scopes.

    Args:
        name: Variable identifier to lookup.

    Returns:
        The SymbolType if found, else None.
    """
    if name in self.symbols:
      return self.symbols[name]
    if self.parent:
      return self.parent.get(name)
    return None

  def function_parent(self) -> "Scope":
    """Nearest enclosing scope whose names a nested function can see."""
    scope = self
    while scope.is_class and scope.parent is not None:
      scope = scope.parent
    return scope


def format_parameters(params: cst.Parameters, drop_first: bool = False) -> str:
  """
  Renders a parameter list for diagnostics, e.g. `msg: str, *inputs`.

  Args:
      params: The CST parameters.
      drop_first: Drop the bound receiver (`self` / `cls`).
  """
  parts: List[str] = []

  def render(param: cst.Param, prefix: str = "") -> str:
    text = prefix + param.name.value
    if param.annotation is not None:
      text += ": " + node_code(param.annotation.annotation)
    return text

  positional = list(params.posonly_params) + list(params.params)
  if drop_first and positional:
    positional = positional[1:]

  parts.extend(render(p) for p in positional)
  if isinstance(params.star_arg, cst.Param):
    parts.append(render(params.star_arg, "*"))
  elif isinstance(params.star_arg, cst.ParamStar):
    parts.append("*")
  parts.extend(render(p) for p in params.kwonly_params)
  if params.star_kwarg is not None:
    parts.append(render(params.star_kwarg, "**"))
  return ", ".join(parts)


def decorator_names(node: cst.FunctionDef) -> List[str]:
  names = []
  for dec in node.decorators:
    target = dec.decorator.func if isinstance(dec.decorator, cst.Call) else dec.decorator
    names.append(get_full_name(target).split(".")[-1])
  return names


def binds_receiver(node: cst.FunctionDef) -> bool:
  """True unless the method is a staticmethod."""
  return "staticmethod" not in decorator_names(node)


class AnnotationResolver:
  """
  Turns annotation expressions into `StaticType`.

  Recognizes builtins, local and imported classes, `Optional[T]`,
  `T | None`, `Union[T, None]`, `Final[T]`, `Annotated[T, ...]` and
  `Literal["..."]`. Anything else becomes an OTHER type named by its source.
  """

  def __init__(self, scope: Scope):
    self.scope = scope

  def resolve(self, node: cst.BaseExpression) -> StaticType:
    if isinstance(node, cst.SimpleString):
      # Forward reference
      try:
        return self.resolve(cst.parse_expression(node.evaluated_value))
      except (cst.ParserSyntaxError, ValueError, TypeError):
        return StaticType.other(node.value)

    if isinstance(node, cst.Name):
      if node.value in BUILTIN_TYPES:
        return StaticType.basic(node.value)
      if node.value == "None":
        return StaticType.basic("None")
      if node.value == "Any":
        return StaticType.dynamic()
      sym = self.scope.get(node.value)
      if isinstance(sym, ClassType):
        return sym.instance()
      return StaticType.other(node.value)

    if isinstance(node, cst.Attribute):
      base = get_full_name(node.value)
      sym = self.scope.get(base.split(".")[0]) if base else None
      if isinstance(sym, ModuleType):
        rest = base.split(".")[1:]
        module = ".".join([sym.path] + rest)
        if module == "typing" and node.attr.value == "Any":
          return StaticType.dynamic()
        return StaticType.named(module, node.attr.value)
      return StaticType.other(node_code(node))

    if isinstance(node, cst.BinaryOperation) and isinstance(node.operator, cst.BitOr):
      members = [node.left, node.right]
      return self._union(members, node)

    if isinstance(node, cst.Subscript):
      head = get_full_name(node.value).split(".")[-1]
      items = [el.slice.value for el in node.slice if isinstance(el.slice, cst.Index)]
      if head == "Optional" and len(items) == 1:
        return StaticType.pointer(self.resolve(items[0]))
      if head == "Union":
        return self._union(items, node)
      if head in ("Final", "Annotated", "ClassVar") and items:
        return self.resolve(items[0])
      if head == "Literal" and items and all(isinstance(i, (cst.SimpleString, cst.ConcatenatedString)) for i in items):
        return StaticType.basic("str")

    return StaticType.other(node_code(node))

  def _union(self, members: Sequence[cst.BaseExpression], node: cst.BaseExpression) -> StaticType:
    rest = [m for m in members if not (isinstance(m, cst.Name) and m.value == "None")]
    if len(rest) == 1 and len(rest) < len(members):
      return StaticType.pointer(self.resolve(rest[0]))
    return StaticType.other(node_code(node))


class ModuleIndex:
  """
  Module-level declarations, seeding the module scope of the call-site pass.
  """

  def __init__(self, module: str):
    self.module = module
    self.scope = Scope(name="module")
    self.classes: Dict[str, ClassType] = {}

  def lookup_class(self, static_type: Optional[StaticType]) -> Optional[ClassType]:
    """
    Finds the definition behind a NAMED type declared in this module.
    """
    if static_type is None:
      return None
    target = static_type.named_target()
    if target is None or target.module != self.module:
      return None
    return self.classes.get(target.type_name)


def relative_module(module: str, level: int, is_package: bool, target: Optional[str]) -> str:
  """
  Resolves `from ..x import y` against the importing module's name.
  """
  parts = module.split(".") if module else []
  if not is_package:
    parts = parts[:-1]
  if level > 1:
    parts = parts[: len(parts) - (level - 1)] if level - 1 <= len(parts) else []
  if target:
    parts.append(target)
  return ".".join(parts)


def bind_import(scope: Scope, node: cst.Import) -> None:
  """
  `import a.b` binds `a`; `import a.b as c` binds `c` to `a.b`.
  """
  for alias in node.names:
    full_path = get_full_name(alias.name)
    if alias.asname and isinstance(alias.asname.name, cst.Name):
      scope.set(alias.asname.name.value, ModuleType(name="module", path=full_path, is_import=True))
    else:
      root = full_path.split(".")[0]
      scope.set(root, ModuleType(name="module", path=root, is_import=True))


def bind_import_from(scope: Scope, node: cst.ImportFrom, module: str, is_package: bool) -> None:
  """
  `from a import b` binds `b`: a class for CapWords names, else a module-like path `a.b`.
  """
  if isinstance(node.names, cst.ImportStar):
    return
  base = get_full_name(node.module) if node.module else ""
  if node.relative:
    base = relative_module(module, len(node.relative), is_package, base or None)

  for alias in node.names:
    import_name = get_full_name(alias.name)
    bind_name = alias.asname.name.value if alias.asname and isinstance(alias.asname.name, cst.Name) else import_name
    if is_class_name(import_name):
      scope.set(bind_name, ClassType(name=import_name, module=base))
    else:
      scope.set(bind_name, ModuleType(name="module", path=f"{base}.{import_name}" if base else import_name))

