"""
Module Indexing Pass.

The `ModuleIndexer` visitor populates a `ModuleIndex` with the module-level
declarations that may be referenced before they appear in source order:

1.  **Imports**: Mapping aliases to `ModuleType` (or `ClassType` for CapWords names).
2.  **Classes**: Bases deriving from `str`, enum-ness, method shapes and attributes.
3.  **Functions**: Parameter shapes and annotated return types.
4.  **Constants**: UPPER_CASE or `Final` names bound exactly once to a literal.

Function bodies are not entered; their names are tracked in source order by
`CallSiteCollector`.
"""

from typing import Dict, List, Optional, Set

import libcst as cst

from pairlint.analysis.expressions import ExpressionTyper
from pairlint.analysis.symbol_table import (
  BUILTIN_TYPES,
  ENUM_BASES,
  STRING_BASES,
  AnnotationResolver,
  ClassType,
  FunctionType,
  ModuleIndex,
  Scope,
  ValueType,
  binds_receiver,
  bind_import,
  bind_import_from,
  format_parameters,
  get_full_name,
  is_constant_name,
)
from pairlint.enums import TypeKind


def is_final(annotation: cst.BaseExpression) -> bool:
  """`Final` or `Final[T]`, bare or `typing.`-qualified."""
  if isinstance(annotation, cst.Subscript):
    annotation = annotation.value
  return get_full_name(annotation).split(".")[-1] == "Final"


def target_names(target: cst.BaseExpression) -> List[str]:
  """Names bound by an assignment or loop target, unpacking tuples."""
  if isinstance(target, cst.Name):
    return [target.value]
  if isinstance(target, (cst.Tuple, cst.List)):
    return [name for element in target.elements for name in target_names(element.value)]
  if isinstance(target, cst.StarredElement):
    return target_names(target.value)
  return []


class _GlobalRebinds(cst.CSTVisitor):
  """Collects `global` declarations and the names assigned in a function body."""

  def __init__(self) -> None:
    self.declared: Set[str] = set()
    self.assigned: Set[str] = set()

  def visit_Global(self, node: cst.Global) -> None:
    self.declared.update(item.name.value for item in node.names)

  def visit_AssignTarget(self, node: cst.AssignTarget) -> None:
    self.assigned.update(target_names(node.target))

  def visit_AnnAssign(self, node: cst.AnnAssign) -> None:
    self.assigned.update(target_names(node.target))

  def visit_AugAssign(self, node: cst.AugAssign) -> None:
    self.assigned.update(target_names(node.target))

  def visit_For(self, node: cst.For) -> None:
    self.assigned.update(target_names(node.target))


class ModuleIndexer(cst.CSTVisitor):
  """
  First pass over a module: records declarations visible at module level.
  """

  def __init__(self, module: str, is_package: bool = False):
    """
    Args:
        module: Dotted name of the module being indexed.
        is_package: True for a package `__init__` (affects relative imports).
    """
    self.index = ModuleIndex(module)
    self.is_package = is_package
    self._class_stack: List[ClassType] = []
    self._assign_counts: Dict[str, int] = {}
    self._candidates: Dict[str, ValueType] = {}

  @property
  def _scope(self) -> Scope:
    return self.index.scope

  def _typer(self) -> ExpressionTyper:
    return ExpressionTyper(self._scope, self.index)

  def _count_binding(self, name: str) -> None:
    self._assign_counts[name] = self._assign_counts.get(name, 0) + 1

  def leave_Module(self, original_node: cst.Module) -> None:
    # A name rebound anywhere at module level is a variable, not a constant
    for name, value in self._candidates.items():
      if self._assign_counts.get(name, 0) == 1:
        self._scope.set(name, value)

  # --- Imports ---

  def visit_Import(self, node: cst.Import) -> Optional[bool]:
    if not self._class_stack:
      bind_import(self._scope, node)
    return False

  def visit_ImportFrom(self, node: cst.ImportFrom) -> Optional[bool]:
    if not self._class_stack:
      bind_import_from(self._scope, node, self.index.module, self.is_package)
    return False

  # --- Definitions ---

  def visit_ClassDef(self, node: cst.ClassDef) -> Optional[bool]:
    base_names = [get_full_name(arg.value) for arg in node.bases if arg.keyword is None]

    underlying = None
    for base in base_names:
      if base in STRING_BASES:
        underlying = "str"
        break
      sym = self._scope.get(base)
      if isinstance(sym, ClassType) and sym.underlying:
        underlying = sym.underlying
        break

    is_enum = any(b.split(".")[-1] in ENUM_BASES for b in base_names)
    cls = ClassType(name=node.name.value, module=self.index.module, underlying=underlying, is_enum=is_enum)

    if not self._class_stack:
      self.index.classes[cls.name] = cls
      self._scope.set(cls.name, cls)
    self._class_stack.append(cls)
    return True

  def leave_ClassDef(self, original_node: cst.ClassDef) -> None:
    self._class_stack.pop()

  def visit_FunctionDef(self, node: cst.FunctionDef) -> Optional[bool]:
    returns = AnnotationResolver(self._scope).resolve(node.returns.annotation) if node.returns else None

    if self._class_stack:
      func = FunctionType(
        name=node.name.value,
        module=self.index.module,
        parameters=format_parameters(node.params, drop_first=binds_receiver(node)),
        returns=returns,
      )
      self._class_stack[-1].methods[func.name] = func
    else:
      func = FunctionType(
        name=node.name.value,
        module=self.index.module,
        parameters=format_parameters(node.params),
        returns=returns,
      )
      self._scope.set(func.name, func)

    # `global NAME` lets a function rebind a module name
    rebinds = _GlobalRebinds()
    node.body.visit(rebinds)
    for name in rebinds.declared & rebinds.assigned:
      self._count_binding(name)
    return False

  # --- Assignments ---

  def visit_Assign(self, node: cst.Assign) -> Optional[bool]:
    for target in node.targets:
      if not isinstance(target.target, cst.Name):
        if not self._class_stack:
          for name in target_names(target.target):
            self._count_binding(name)
        continue
      name = target.target.value

      if self._class_stack:
        self._record_class_attribute(name, node.value, None)
        continue

      self._count_binding(name)

      if isinstance(node.value, cst.Call) and get_full_name(node.value.func).split(".")[-1] == "NewType":
        self._record_new_type(name, node.value)
        continue

      if is_constant_name(name):
        self._record_constant(name, node.value)
    return False

  def visit_AnnAssign(self, node: cst.AnnAssign) -> Optional[bool]:
    if not isinstance(node.target, cst.Name):
      return False
    name = node.target.value
    annotation = node.annotation.annotation

    if self._class_stack:
      self._record_class_attribute(name, node.value, annotation)
      return False

    self._count_binding(name)
    if node.value is not None and (is_final(annotation) or is_constant_name(name)):
      self._record_constant(name, node.value)
    return False

  def visit_AugAssign(self, node: cst.AugAssign) -> Optional[bool]:
    if not self._class_stack and isinstance(node.target, cst.Name):
      self._count_binding(node.target.value)
    return False

  def visit_For(self, node: cst.For) -> Optional[bool]:
    if not self._class_stack:
      for name in target_names(node.target):
        self._count_binding(name)
    return True

  def _record_constant(self, name: str, value: cst.BaseExpression) -> None:
    info = self._typer().describe(value)
    if info.constant_kind is not None:
      self._candidates[name] = ValueType(name=name, static_type=info.static_type, constant_kind=info.constant_kind)

  def _record_new_type(self, name: str, call: cst.Call) -> None:
    """`Key = NewType("Key", str)` declares a named type over `str`."""
    underlying = None
    if len(call.args) >= 2 and get_full_name(call.args[1].value) in BUILTIN_TYPES:
      underlying = get_full_name(call.args[1].value)
    cls = ClassType(name=name, module=self.index.module, underlying=underlying)
    self.index.classes[name] = cls
    self._scope.set(name, cls)

  def _record_class_attribute(
    self,
    name: str,
    value: Optional[cst.BaseExpression],
    annotation: Optional[cst.BaseExpression],
  ) -> None:
    owner = self._class_stack[-1]

    if owner.is_enum:
      # Enum members are instances of the enum
      owner.attributes[name] = ValueType(name=name, static_type=owner.instance())
      return

    if annotation is not None:
      resolved = AnnotationResolver(self._scope).resolve(annotation)
      if resolved.kind != TypeKind.OTHER or value is None:
        owner.attributes[name] = ValueType(name=name, static_type=resolved)
        return

    if value is not None:
      info = self._typer().describe(value)
      constant = info.constant_kind if is_constant_name(name) else None
      owner.attributes[name] = ValueType(name=name, static_type=info.static_type, constant_kind=constant)
