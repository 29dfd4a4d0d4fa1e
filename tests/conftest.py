"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- A recording console so CLI output can be asserted on.
- Helpers to build registries and lint inline code.
"""

import sys
import textwrap
from pathlib import Path
from typing import Callable, List, Sequence

import pytest

# Add src to path so we can import 'pairlint' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from rich.console import Console  # noqa: E402

from pairlint.config import LintConfig  # noqa: E402
from pairlint.core.engine import PairsEngine  # noqa: E402
from pairlint.utils.console import reset_console, set_console  # noqa: E402


@pytest.fixture
def recorded_console():
  """
  Swaps the global console for a recording one (wide, no colors).

  Yields:
      Console: Use `export_text()` to read what was printed.
  """
  rec = Console(record=True, width=240, force_terminal=False, color_system=None)
  set_console(rec)
  yield rec
  reset_console()


@pytest.fixture
def lint_code() -> Callable[..., List[str]]:
  """
  Returns a helper linting dedented code and returning bare messages.
  """

  def _lint(
    code: str,
    pair_funcs: Sequence[str] = (),
    assume_pairs: Sequence[str] = (),
    module: str = "app",
    **options,
  ) -> List[str]:
    config = LintConfig(pair_funcs=list(pair_funcs), assume_pairs=list(assume_pairs), **options)
    engine = PairsEngine.from_config(config)
    result = engine.run(textwrap.dedent(code), module=module)
    assert result.success, result.errors
    return [d.message for d in result.diagnostics]

  return _lint
