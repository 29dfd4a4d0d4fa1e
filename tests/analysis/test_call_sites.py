"""
Tests for Call Site Collection.

Verifies that call expressions are turned into descriptors with the right
callee identity, receiver type, parameter shape and argument facts.
"""

import textwrap
from typing import List

import libcst as cst
from libcst.metadata import MetadataWrapper

from pairlint.analysis.call_sites import CallSiteCollector
from pairlint.analysis.indexer import ModuleIndexer
from pairlint.core.descriptors import CallSiteDescriptor, Position
from pairlint.enums import CallKind, TypeKind


def collect(code: str, module: str = "app") -> CallSiteCollector:
  tree = cst.parse_module(textwrap.dedent(code))
  indexer = ModuleIndexer(module)
  tree.visit(indexer)
  collector = CallSiteCollector(indexer.index)
  MetadataWrapper(tree).visit(collector)
  return collector


def calls_named(code: str, function: str) -> List[CallSiteDescriptor]:
  return [c for c in collect(code).call_sites if c.function == function]


def test_module_function_call():
  code = """
  import acme.log

  acme.log.info("k", 1)
  """
  (site,) = calls_named(code, "info")
  assert site.kind == CallKind.FUNCTION
  assert site.package == "acme.log"
  assert site.receiver is None
  assert [a.is_constant for a in site.arguments] == [True, True]
  assert [a.constant_kind for a in site.arguments] == ["str", "int"]


def test_method_call_on_local_instance():
  code = """
  class Logger:
    def info(self, msg, *pairs):
      pass

  log = Logger()
  log.info("m", "k", "v")
  """
  (site,) = calls_named(code, "info")
  assert site.kind == CallKind.METHOD
  assert site.receiver.name == "app.Logger"
  assert site.parameters == "msg, *pairs"


def test_method_called_through_class_object():
  code = """
  class Logger:
    @classmethod
    def make(cls, *pairs):
      cls.make()

  Logger.make("k", "v")
  """
  sites = calls_named(code, "make")
  assert [s.kind for s in sites] == [CallKind.METHOD, CallKind.METHOD]
  assert all(s.receiver.name == "app.Logger" for s in sites)
  assert sites[0].parameters == "*pairs"


def test_function_locals_shadow_module_names():
  code = """
  from acme.log import Logger

  def run(log: Logger, other):
    log.info("k")
    other.info("k")

    log = 3
    log.info("k")
  """
  sites = calls_named(code, "info")
  assert [s.receiver.name for s in sites] == ["acme.log.Logger", "Any", "int"]
  assert sites[2].receiver.kind == TypeKind.BASIC


def test_nested_function_is_bound_in_enclosing_function():
  code = """
  class Box:
    limit = 3

    def run(self):
      def inner():
        return limit

      inner()
  """
  (site,) = calls_named(code, "inner")
  assert site.kind == CallKind.FUNCTION
  assert site.package == "app"
  assert site.parameters == ""


def test_loop_and_with_targets_are_untyped():
  code = """
  def run(items, ctx):
    for log in items:
      log.info("k")
    with ctx as log:
      log.info("k")
  """
  sites = calls_named(code, "info")
  assert [s.receiver.kind for s in sites] == [TypeKind.DYNAMIC, TypeKind.DYNAMIC]


def test_walrus_binding():
  code = """
  class Logger:
    def info(self, *pairs):
      pass

  if (log := Logger()):
    log.info("k", "v")
  """
  (site,) = calls_named(code, "info")
  assert site.receiver.name == "app.Logger"


def test_final_local_is_a_constant():
  code = """
  from typing import Final

  def run(log):
    KEY: Final = "k"
    count: int = 1
    log.info(KEY, count)
  """
  (site,) = calls_named(code, "info")
  key, count = site.arguments
  assert key.is_constant and key.constant_kind == "str"
  assert not count.is_constant and count.static_type.name == "int"


def test_variable_holding_constant_is_not_constant():
  code = """
  def run(log):
    key = "k"
    log.info(key, 1)
  """
  (site,) = calls_named(code, "info")
  key = site.arguments[0]
  assert not key.is_constant
  assert key.static_type.is_string


def test_star_args_are_skipped_and_counted():
  code = """
  def run(log, items):
    log.info(*items)
    log.info("k", *items)
    log.info("k", "v", key=1)
  """
  collector = collect(code)
  sites = [c for c in collector.call_sites if c.function == "info"]
  assert collector.skipped == 2
  assert len(sites) == 1
  assert len(sites[0].arguments) == 2


def test_positions_are_recorded():
  collector = collect('import p\np.X(\n    "a",\n    1,\n)\n')
  (site,) = collector.call_sites
  assert site.position == Position(line=2, column=0)
  assert [a.position for a in site.arguments] == [Position(line=3, column=4), Position(line=4, column=4)]


def test_unidentifiable_callees_are_ignored():
  code = """
  handlers = {}
  handlers["x"]("k")
  (lambda *a: None)("k")
  """
  assert collect(code).call_sites == []


def test_enum_member_receiver():
  code = """
  from enum import Enum

  class Level(Enum):
    LOW = 1

    def log(self, *pairs):
      pass

  Level.LOW.log("k")
  """
  (site,) = calls_named(code, "log")
  assert site.receiver.name == "app.Level"
  assert site.parameters == "*pairs"
