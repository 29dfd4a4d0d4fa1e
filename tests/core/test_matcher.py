"""
Tests for the Call Matcher.

Verifies:
1.  Package functions match `(package, function)` only, with no fallback.
2.  Methods probe the generic selector before the concrete one.
3.  Unnamed receivers never match; untyped receivers only match generic rules.
4.  Display names for functions and methods.
"""

from pairlint.core.descriptors import CallSiteDescriptor, StaticType
from pairlint.core.matcher import CallMatcher, describe_method
from pairlint.core.selectors import Registry
from pairlint.enums import CallKind

LOGGER = StaticType.named("app", "Logger")


def method_call(function: str, receiver: StaticType, parameters=None) -> CallSiteDescriptor:
  return CallSiteDescriptor(kind=CallKind.METHOD, function=function, receiver=receiver, parameters=parameters)


def function_call(package: str, function: str) -> CallSiteDescriptor:
  return CallSiteDescriptor(kind=CallKind.FUNCTION, function=function, package=package)


def test_package_function_match():
  matcher = CallMatcher(Registry.from_specs(["p.X=1"]))
  result = matcher.match(function_call("p", "X"))
  assert result is not None
  assert result.offset == 1
  assert result.display_name == "p.X"


def test_package_function_has_no_fallback():
  """A generic `.X` rule does not apply to package functions named X."""
  matcher = CallMatcher(Registry.from_specs([".X=0"]))
  assert matcher.match(function_call("p", "X")) is None
  assert matcher.match(function_call("q", "X")) is None


def test_package_function_requires_same_package():
  matcher = CallMatcher(Registry.from_specs(["p.X=1"]))
  assert matcher.match(function_call("other", "X")) is None


def test_generic_method_matches_any_named_receiver():
  matcher = CallMatcher(Registry.from_specs([".log=0"]))
  assert matcher.match(method_call("log", LOGGER)).offset == 0
  assert matcher.match(method_call("log", StaticType.named("other.mod", "Thing"))).offset == 0


def test_concrete_method_match():
  matcher = CallMatcher(Registry.from_specs(["app:Logger.log=2"]))
  result = matcher.match(method_call("log", LOGGER, parameters="*inputs"))
  assert result.offset == 2
  assert result.display_name == "method (app.Logger) log(*inputs)"


def test_concrete_method_requires_same_type():
  matcher = CallMatcher(Registry.from_specs(["app:Logger.log=2"]))
  assert matcher.match(method_call("log", StaticType.named("app", "Other"))) is None


def test_generic_takes_precedence_over_concrete():
  matcher = CallMatcher(Registry.from_specs(["app:Logger.log=2", ".log=0"]))
  assert matcher.match(method_call("log", LOGGER)).offset == 0


def test_optional_receiver_is_unwrapped():
  matcher = CallMatcher(Registry.from_specs(["app:Logger.log=1"]))
  result = matcher.match(method_call("log", StaticType.pointer(LOGGER)))
  assert result.offset == 1
  assert result.display_name == "method (app.Logger) log(...)"


def test_unnamed_receivers_never_match():
  matcher = CallMatcher(Registry.from_specs([".log=0"]))
  assert matcher.match(method_call("log", StaticType.other("Callable"))) is None
  assert matcher.match(method_call("log", StaticType.basic("str"))) is None
  assert matcher.match(CallSiteDescriptor(kind=CallKind.METHOD, function="log")) is None


def test_dynamic_receiver_matches_generic_only():
  matcher = CallMatcher(Registry.from_specs([".log=0", "app:Logger.info=0"]))
  result = matcher.match(method_call("log", StaticType.dynamic()))
  assert result.display_name == "method (Any) log(...)"
  assert matcher.match(method_call("info", StaticType.dynamic())) is None


def test_dynamic_receivers_can_be_disabled():
  matcher = CallMatcher(Registry.from_specs([".log=0"]), dynamic_receivers=False)
  assert matcher.match(method_call("log", StaticType.dynamic())) is None
  assert matcher.match(method_call("log", LOGGER)) is not None


def test_describe_method():
  assert describe_method(LOGGER, "log", "msg: str, *inputs") == "method (app.Logger) log(msg: str, *inputs)"
  assert describe_method(LOGGER, "log", "") == "method (app.Logger) log()"
