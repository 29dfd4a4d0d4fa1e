"""
Tests for the symbol table helpers.

Verifies:
1.  Annotation resolution (builtins, classes, Optional forms, wrappers).
2.  Import binding and relative module resolution.
3.  Parameter rendering for method labels.
"""

import libcst as cst
import pytest

from pairlint.analysis.symbol_table import (
  AnnotationResolver,
  ClassType,
  ModuleType,
  Scope,
  bind_import,
  bind_import_from,
  format_parameters,
  get_full_name,
  relative_module,
)
from pairlint.core.descriptors import StaticType
from pairlint.enums import TypeKind


@pytest.fixture
def scope() -> Scope:
  s = Scope()
  s.set("Pairs", ClassType(name="Pairs", module="acme.details"))
  s.set("Key", ClassType(name="Key", module="app", underlying="str"))
  s.set("acme", ModuleType(name="module", path="acme"))
  s.set("t", ModuleType(name="module", path="typing"))
  return s


def resolve(scope: Scope, source: str) -> StaticType:
  return AnnotationResolver(scope).resolve(cst.parse_expression(source))


PAIRS = StaticType.named("acme.details", "Pairs")


@pytest.mark.parametrize(
  "source, expected",
  [
    ("str", StaticType.basic("str")),
    ("int", StaticType.basic("int")),
    ("Pairs", PAIRS),
    ("'Pairs'", PAIRS),
    ("Key", StaticType.named("app", "Key", "str")),
    ("acme.details.Pairs", PAIRS),
    ("Optional[Pairs]", StaticType.pointer(PAIRS)),
    ("typing.Optional[Pairs]", StaticType.pointer(PAIRS)),
    ("Pairs | None", StaticType.pointer(PAIRS)),
    ("Union[Pairs, None]", StaticType.pointer(PAIRS)),
    ("Final[str]", StaticType.basic("str")),
    ("Annotated[Pairs, 'meta']", PAIRS),
    ("Literal['a', 'b']", StaticType.basic("str")),
    ("Any", StaticType.dynamic()),
    ("t.Any", StaticType.dynamic()),
  ],
)
def test_resolve_annotation(scope, source, expected):
  assert resolve(scope, source) == expected


@pytest.mark.parametrize("source", ["List[str]", "Union[int, str]", "Callable[..., None]", "Unknown", "Literal[1]"])
def test_unrecognized_annotations_are_other(scope, source):
  assert resolve(scope, source).kind == TypeKind.OTHER


def test_optional_display_name(scope):
  assert resolve(scope, "Optional[Pairs]").name == "Optional[acme.details.Pairs]"


def test_scope_lookup_walks_parents():
  root = Scope()
  root.set("a", ModuleType(name="module", path="a"))
  cls = Scope(parent=root, name="class_C", is_class=True)
  inner = Scope(parent=cls, name="func")

  assert inner.get("a").path == "a"
  assert inner.get("missing") is None
  assert cls.function_parent() is root
  assert inner.function_parent() is inner


@pytest.mark.parametrize(
  "module, level, is_package, target, expected",
  [
    ("acme.api", 1, False, "errors", "acme.errors"),
    ("acme.api", 1, False, None, "acme"),
    ("acme.sub.api", 2, False, "errors", "acme.errors"),
    ("acme", 1, True, "errors", "acme.errors"),
    ("acme.sub", 2, True, None, "acme"),
  ],
)
def test_relative_module(module, level, is_package, target, expected):
  assert relative_module(module, level, is_package, target) == expected


def test_bind_import():
  scope = Scope()
  bind_import(scope, cst.parse_statement("import acme.log, json as j").body[0])
  assert scope.get("acme").path == "acme"
  assert scope.get("j").path == "json"
  assert scope.get("log") is None


def test_bind_import_from():
  scope = Scope()
  stmt = cst.parse_statement("from acme.log import Logger, info, Pairs as P, WRAP").body[0]
  bind_import_from(scope, stmt, "app", False)

  logger = scope.get("Logger")
  assert isinstance(logger, ClassType)
  assert logger.module == "acme.log"
  assert scope.get("P").name == "Pairs"
  assert isinstance(scope.get("info"), ModuleType)
  assert scope.get("info").path == "acme.log.info"
  assert scope.get("WRAP").path == "acme.log.WRAP"


def test_bind_import_from_ignores_star():
  scope = Scope()
  bind_import_from(scope, cst.parse_statement("from acme import *").body[0], "app", False)
  assert scope.symbols == {}


@pytest.mark.parametrize(
  "source, drop_first, expected",
  [
    ("def f(self, *inputs): pass", True, "*inputs"),
    ("def f(self, msg: str, *pairs, level=0, **kw): pass", True, "msg: str, *pairs, level, **kw"),
    ("def f(a, *, b): pass", False, "a, *, b"),
    ("def f(): pass", False, ""),
  ],
)
def test_format_parameters(source, drop_first, expected):
  func = cst.parse_statement(source)
  assert format_parameters(func.params, drop_first=drop_first) == expected


def test_get_full_name():
  assert get_full_name(cst.parse_expression("a.b.c")) == "a.b.c"
  assert get_full_name(cst.parse_expression("a().b")) == ""
