"""
Tests for the logging utility and console injection.

Verifies:
1. The proxy forwards to the injected console.
2. Logging wrappers route through the RichHandler of the active console.
3. Verbose mode lowers the root level.
"""

import logging

import pytest
from rich.console import Console

from pairlint.utils.console import (
  console,
  log_error,
  log_info,
  log_success,
  log_warning,
  reset_console,
  set_console,
  set_verbose,
)


@pytest.fixture(autouse=True)
def cleanup_console():
  """Ensures console is reset to stdout after every test."""
  reset_console()
  yield
  reset_console()


def test_proxy_forwards_print():
  rec = Console(record=True, width=120, color_system=None)
  set_console(rec)

  console.print("hello pairs")

  assert console.backend is rec
  assert "hello pairs" in console.export_text()


def test_log_wrappers_reach_injected_console():
  rec = Console(record=True, width=200, color_system=None)
  set_console(rec)

  log_info("checking files")
  log_success("all good")
  log_warning("no rules")
  log_error("broken file")

  output = rec.export_text()
  for text in ("checking files", "all good", "no rules", "broken file"):
    assert text in output


def test_verbose_shows_debug_records():
  rec = Console(record=True, width=200, color_system=None)
  set_console(rec)

  logging.getLogger("pairlint.test").debug("hidden detail")
  set_verbose(True)
  logging.getLogger("pairlint.test").debug("visible detail")
  set_verbose(False)

  output = rec.export_text()
  assert "hidden detail" not in output
  assert "visible detail" in output
