"""
Tests for Expression Typing.

Verifies:
1.  Literal and folded constants get their constant kind.
2.  Module constants (UPPER_CASE / Final, bound once) are constants.
3.  Non-constant expressions get a shallow static type.
"""

import libcst as cst
import pytest

from pairlint.analysis.expressions import ExpressionTyper
from pairlint.analysis.indexer import ModuleIndexer
from pairlint.analysis.symbol_table import Scope, ValueType
from pairlint.core.descriptors import StaticType
from pairlint.enums import TypeKind

MODULE = """
from enum import Enum
from typing import Final

import acme.log
from acme.keys import USER_ID, user_key

KEY = "name"
LIMIT: Final = 10
RATIO: Final[float] = 0.5
counter = 0
REBOUND = "a"
REBOUND = "b"
BUMPED = 1
BUMPED += 1
LOOPED = "a"
PAIRED = "a"
PAIRED, other = "b", "c"
GLOBAL_KEY = "k"

for LOOPED in ["b"]:
  pass

class Key(str):
  pass

class Color(Enum):
  RED = "red"

class Point:
  x: int = 0
  LABEL = "point"

def make_key() -> Key:
  return Key("k")

def untyped():
  pass

def reset():
  global GLOBAL_KEY
  GLOBAL_KEY = "j"
"""


@pytest.fixture(scope="module")
def typer() -> ExpressionTyper:
  """Typer for a function body inside MODULE, with a local `counter: int`."""
  indexer = ModuleIndexer("app")
  cst.parse_module(MODULE).visit(indexer)
  scope = Scope(parent=indexer.index.scope, name="func")
  scope.set("counter", ValueType(name="counter", static_type=StaticType.basic("int")))
  return ExpressionTyper(scope, indexer.index)


def describe(typer: ExpressionTyper, source: str):
  return typer.describe(cst.parse_expression(source))


@pytest.mark.parametrize(
  "source, kind",
  [
    ('"k"', "str"),
    ("'k'", "str"),
    ('"a" "b"', "str"),
    ('f"plain"', "str"),
    ('"a" + "b"', "str"),
    ('"-" * 3', "str"),
    ('b"k"', "bytes"),
    ("1", "int"),
    ("-1", "int"),
    ("1 + 2", "int"),
    ("1 + 2.0", "float"),
    ("4 / 2", "float"),
    ("2j", "complex"),
    ("True", "bool"),
    ("not 1", "bool"),
    ("None", "None"),
    ("KEY", "str"),
    ("LIMIT", "int"),
    ("RATIO", "float"),
    ("Point.LABEL", "str"),
  ],
)
def test_constants(typer, source, kind):
  info = describe(typer, source)
  assert info.is_constant
  assert info.constant_kind == kind


@pytest.mark.parametrize(
  "source, name",
  [
    ('f"k{counter}"', "str"),
    ("str(counter)", "str"),
    ("len([])", "int"),
    ('"k".upper()', "str"),
    ('"%s" % counter', "str"),
    ("counter", "int"),
    ("counter + 1", "int"),
    ("counter == 1", "bool"),
  ],
)
def test_basic_expressions(typer, source, name):
  info = describe(typer, source)
  assert not info.is_constant
  assert info.static_type.kind == TypeKind.BASIC
  assert info.static_type.name == name


def test_rebound_and_lowercase_names_are_not_constants(typer):
  assert not describe(typer, "REBOUND").is_constant
  assert "REBOUND" not in typer.index.scope.symbols
  assert "KEY" in typer.index.scope.symbols


@pytest.mark.parametrize("name", ["BUMPED", "LOOPED", "PAIRED", "GLOBAL_KEY"])
def test_names_rebound_other_ways_are_not_constants(typer, name):
  assert name not in typer.index.scope.symbols


def test_class_instances(typer):
  key = describe(typer, 'Key("k")').static_type
  assert key.kind == TypeKind.NAMED
  assert key.name == "app.Key"
  assert key.is_string

  assert describe(typer, "make_key()").static_type == key

  point = describe(typer, "Point()").static_type
  assert point.name == "app.Point"
  assert not point.is_string


def test_enum_member_is_instance_of_enum(typer):
  info = describe(typer, "Color.RED")
  assert not info.is_constant
  assert info.static_type.name == "app.Color"
  assert info.static_type.is_string is False


def test_imported_class_from_module_attribute(typer):
  info = describe(typer, "acme.log.Logger()")
  assert info.static_type.kind == TypeKind.NAMED
  assert info.static_type.module == "acme.log"
  assert info.static_type.type_name == "Logger"


@pytest.mark.parametrize(
  "source, name",
  [
    ("[1, 2]", "list"),
    ("{'a': 1}", "dict"),
    ("(1, 2)", "tuple"),
    ("lambda: 1", "Callable"),
    ("untyped", "Callable"),
    ("Point", "type[app.Point]"),
    ("acme", "module"),
  ],
)
def test_other_expressions(typer, source, name):
  info = describe(typer, source)
  assert info.static_type.kind == TypeKind.OTHER
  assert info.static_type.name == name


@pytest.mark.parametrize(
  "source",
  [
    "unknown",
    "untyped()",
    "counter if counter else 'x'",
    "acme.log.make()",
    "acme.log",
    "acme.log.LEVEL",
    "USER_ID",
    "user_key",
  ],
)
def test_unknown_expressions_are_dynamic(typer, source):
  assert describe(typer, source).static_type.kind == TypeKind.DYNAMIC
