"""
Call Site Collection.

Second pass over a module. `CallSiteCollector` walks the tree in source order,
tracking function-local bindings on top of the `ModuleIndex`, and turns every
call expression it can identify into a `CallSiteDescriptor`:

-   `func(...)` where `func` is defined at module level, imported, or a builtin
    -> package function.
-   `module.func(...)` -> package function of `module`.
-   `obj.method(...)` / `Class.method(...)` -> method on the receiver's static type.

Calls through other callee shapes (subscripts, lambdas, call results that
are not attribute accesses) cannot correspond to a rule and are ignored.
"""

import builtins
import logging
from typing import List, Optional, Tuple

import libcst as cst
from libcst.metadata import PositionProvider

from pairlint.analysis.expressions import ExpressionTyper
from pairlint.analysis.indexer import is_final
from pairlint.analysis.symbol_table import (
  AnnotationResolver,
  ClassType,
  FunctionType,
  ModuleIndex,
  ModuleType,
  Scope,
  ValueType,
  bind_import,
  bind_import_from,
  binds_receiver,
  decorator_names,
  format_parameters,
)
from pairlint.core.descriptors import ArgumentDescriptor, CallSiteDescriptor, Position, StaticType
from pairlint.enums import CallKind

logger = logging.getLogger(__name__)

_Callee = Tuple[CallKind, str, str, Optional[StaticType], Optional[str]]


class CallSiteCollector(cst.CSTVisitor):
  """
  Produces one descriptor per identifiable call expression.

  Attributes:
      index: Declarations from the indexing pass.
      call_sites: Collected descriptors, in traversal order.
      skipped: Number of identified calls skipped because of `*args` splats.
  """

  METADATA_DEPENDENCIES = (PositionProvider,)

  def __init__(self, index: ModuleIndex, is_package: bool = False):
    self.index = index
    self.is_package = is_package
    self.call_sites: List[CallSiteDescriptor] = []
    self.skipped = 0
    self._scopes: List[Scope] = [Scope(parent=index.scope, name="module_body")]
    self._classes: List[Optional[ClassType]] = []

  @property
  def scope(self) -> Scope:
    return self._scopes[-1]

  def _typer(self) -> ExpressionTyper:
    return ExpressionTyper(self.scope, self.index)

  def _position(self, node: cst.CSTNode) -> Position:
    code_range = self.get_metadata(PositionProvider, node)
    return Position(line=code_range.start.line, column=code_range.start.column)

  # --- Scoping ---

  def visit_ClassDef(self, node: cst.ClassDef) -> None:
    at_module_level = len(self._scopes) == 1
    cls = self.index.classes.get(node.name.value) if at_module_level else None
    self._classes.append(cls)
    self._scopes.append(Scope(parent=self.scope, name=f"class_{node.name.value}", is_class=True))

  def leave_ClassDef(self, original_node: cst.ClassDef) -> None:
    self._scopes.pop()
    self._classes.pop()

  def visit_FunctionDef(self, node: cst.FunctionDef) -> None:
    enclosing = self.scope
    in_class = enclosing.is_class
    owner = self._classes[-1] if in_class and self._classes else None

    if not in_class and len(self._scopes) > 1:
      # Nested function: visible by name in its enclosing function
      returns = AnnotationResolver(enclosing).resolve(node.returns.annotation) if node.returns else None
      enclosing.set(
        node.name.value,
        FunctionType(
          name=node.name.value,
          module=self.index.module,
          parameters=format_parameters(node.params),
          returns=returns,
        ),
      )

    scope = Scope(parent=enclosing.function_parent(), name=f"func_{node.name.value}")
    resolver = AnnotationResolver(scope)

    params = list(node.params.posonly_params) + list(node.params.params)
    if in_class and params and binds_receiver(node):
      receiver = params.pop(0)
      if owner is not None:
        bound = owner if "classmethod" in decorator_names(node) else ValueType(name="self", static_type=owner.instance())
        scope.set(receiver.name.value, bound)
      else:
        scope.set(receiver.name.value, ValueType(name="self"))

    for param in params + list(node.params.kwonly_params):
      static_type = resolver.resolve(param.annotation.annotation) if param.annotation else StaticType.dynamic()
      scope.set(param.name.value, ValueType(name=param.name.value, static_type=static_type))

    if isinstance(node.params.star_arg, cst.Param):
      scope.set(node.params.star_arg.name.value, ValueType(name="args", static_type=StaticType.other("tuple")))
    if node.params.star_kwarg is not None:
      scope.set(node.params.star_kwarg.name.value, ValueType(name="kwargs", static_type=StaticType.other("dict")))

    self._scopes.append(scope)

  def leave_FunctionDef(self, original_node: cst.FunctionDef) -> None:
    self._scopes.pop()

  def visit_Lambda(self, node: cst.Lambda) -> None:
    scope = Scope(parent=self.scope, name="lambda")
    for param in list(node.params.posonly_params) + list(node.params.params) + list(node.params.kwonly_params):
      scope.set(param.name.value, ValueType(name=param.name.value))
    self._scopes.append(scope)

  def leave_Lambda(self, original_node: cst.Lambda) -> None:
    self._scopes.pop()

  # --- Bindings ---

  def visit_Import(self, node: cst.Import) -> Optional[bool]:
    bind_import(self.scope, node)
    return False

  def visit_ImportFrom(self, node: cst.ImportFrom) -> Optional[bool]:
    bind_import_from(self.scope, node, self.index.module, self.is_package)
    return False

  def _is_module_constant(self, name: str) -> bool:
    if len(self._scopes) != 1:
      return False
    sym = self.index.scope.symbols.get(name)
    return isinstance(sym, ValueType) and sym.constant_kind is not None

  def _bind_dynamic(self, target: cst.BaseExpression) -> None:
    if isinstance(target, cst.Name):
      self.scope.set(target.value, ValueType(name=target.value))
    elif isinstance(target, (cst.Tuple, cst.List)):
      for element in target.elements:
        self._bind_dynamic(element.value)
    elif isinstance(target, cst.StarredElement):
      self._bind_dynamic(target.value)

  def leave_Assign(self, original_node: cst.Assign) -> None:
    info = self._typer().describe(original_node.value)
    for target in original_node.targets:
      if isinstance(target.target, cst.Name):
        name = target.target.value
        if self._is_module_constant(name):
          continue
        # A variable holding a constant is not itself a constant
        self.scope.set(name, ValueType(name=name, static_type=info.static_type))
      else:
        self._bind_dynamic(target.target)

  def leave_AnnAssign(self, original_node: cst.AnnAssign) -> None:
    target = original_node.target
    if not isinstance(target, cst.Name) or self._is_module_constant(target.value):
      return
    annotation = original_node.annotation.annotation
    static_type = AnnotationResolver(self.scope).resolve(annotation)
    constant_kind = None
    if original_node.value is not None and is_final(annotation):
      info = self._typer().describe(original_node.value)
      constant_kind = info.constant_kind
      if not isinstance(annotation, cst.Subscript):
        # Bare `Final`: the type is inferred from the value
        static_type = info.static_type
    self.scope.set(target.value, ValueType(name=target.value, static_type=static_type, constant_kind=constant_kind))

  def leave_NamedExpr(self, original_node: cst.NamedExpr) -> None:
    if isinstance(original_node.target, cst.Name):
      info = self._typer().describe(original_node.value)
      name = original_node.target.value
      self.scope.set(name, ValueType(name=name, static_type=info.static_type))

  def visit_For(self, node: cst.For) -> None:
    self._bind_dynamic(node.target)

  def visit_CompFor(self, node: cst.CompFor) -> None:
    self._bind_dynamic(node.target)

  def visit_WithItem(self, node: cst.WithItem) -> None:
    if node.asname is not None:
      self._bind_dynamic(node.asname.name)

  def visit_ExceptHandler(self, node: cst.ExceptHandler) -> None:
    if node.name is not None:
      self._bind_dynamic(node.name.name)

  # --- Calls ---

  def visit_Call(self, node: cst.Call) -> None:
    call_site = self.describe_call(node)
    if call_site is not None:
      self.call_sites.append(call_site)

  def describe_call(self, node: cst.Call) -> Optional[CallSiteDescriptor]:
    """
    Builds the descriptor of a call, or None if the callee is unidentifiable.
    """
    typer = self._typer()
    callee = self._resolve_callee(node.func, typer)
    if callee is None:
      return None
    kind, function, package, receiver, parameters = callee

    positional = [arg for arg in node.args if arg.keyword is None and arg.star != "**"]
    if any(arg.star == "*" for arg in positional):
      self.skipped += 1
      logger.debug("Skipping %s: star-args make the arity unknown", function)
      return None

    arguments = []
    for i, arg in enumerate(positional):
      info = typer.describe(arg.value)
      position = self._position(arg.value)
      if info.is_constant:
        arguments.append(ArgumentDescriptor.constant(i, info.constant_kind, position))
      else:
        arguments.append(ArgumentDescriptor.expression(i, info.static_type, position))

    return CallSiteDescriptor(
      kind=kind,
      function=function,
      package=package,
      receiver=receiver,
      arguments=tuple(arguments),
      position=self._position(node),
      parameters=parameters,
    )

  def _resolve_callee(self, func: cst.BaseExpression, typer: ExpressionTyper) -> Optional[_Callee]:
    if isinstance(func, cst.Name):
      return self._resolve_name_callee(func)

    if not isinstance(func, cst.Attribute):
      return None

    name = func.attr.value
    base = typer.resolve_symbol(func.value)

    if isinstance(base, ModuleType):
      return CallKind.FUNCTION, name, base.path, None, None

    if isinstance(base, ClassType):
      method = base.methods.get(name)
      return CallKind.METHOD, name, "", base.instance(), method.parameters if method else None

    receiver = typer.describe(func.value).static_type
    cls = self.index.lookup_class(receiver)
    method = cls.methods.get(name) if cls is not None else None
    return CallKind.METHOD, name, "", receiver, method.parameters if method else None

  def _resolve_name_callee(self, func: cst.Name) -> Optional[_Callee]:
    sym = self.scope.get(func.value)

    if isinstance(sym, FunctionType):
      return CallKind.FUNCTION, sym.name, sym.module, None, sym.parameters

    if isinstance(sym, ClassType):
      init = sym.methods.get("__init__")
      return CallKind.FUNCTION, sym.name, sym.module, None, init.parameters if init else None

    if isinstance(sym, ModuleType):
      package, _, name = sym.path.rpartition(".")
      if not package:
        return None
      return CallKind.FUNCTION, name, package, None, None

    if sym is None and hasattr(builtins, func.value):
      return CallKind.FUNCTION, func.value, "builtins", None, None

    return None
