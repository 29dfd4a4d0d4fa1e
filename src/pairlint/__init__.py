"""
pairlint Package.

A static checker for key/value pair arguments. Functions such as structured
loggers take an alternating sequence of string keys and arbitrary values::

    log.info("name", "frew", "job", "engineer", "age")  # missing value
    log.info("message", "successful!", 3)              # odd count, 3 is a dangling key

`pairlint` flags calls with an odd number of trailing arguments and keys that
are not provably strings.

Usage
-----

Simple String Check
^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import pairlint
    messages = pairlint.lint('log.info(1, "bar")', pair_funcs=[".info=0"])
    # ['<string>:1:10: arg 0 to method (Any) info(...) is constant int but should be a constant string']

Advanced Usage (Engine)
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from pairlint import LintConfig, PairsEngine

    config = LintConfig(pair_funcs=["acme.errors:wrap=2"], assume_pairs=["acme.details.Pairs"])
    engine = PairsEngine.from_config(config)
    result = engine.run(code, module="acme.api")
    for diagnostic in result.diagnostics:
        print(diagnostic.format())
"""

from typing import Iterable, List

from pairlint.config import LintConfig
from pairlint.core.diagnostics import Diagnostic
from pairlint.core.engine import LintResult, PairsEngine
from pairlint.core.selectors import ConfigurationError, Registry

__version__ = "0.1.0"


def lint(
  code: str,
  pair_funcs: Iterable[str] = (),
  assume_pairs: Iterable[str] = (),
  module: str = "__main__",
) -> List[str]:
  """
  Checks a string of Python code and returns formatted diagnostics.

  Args:
      code (str): The source code to check.
      pair_funcs (Iterable[str]): Rule specifications, e.g. `.log=0`.
      assume_pairs (Iterable[str]): Whitelisted container types, e.g. `acme.Pairs`.
      module (str): Module name the code is analyzed as.

  Returns:
      List[str]: `path:line:col: message` strings, empty when clean.

  Raises:
      ConfigurationError: If a specification is malformed.
      ValueError: If the code cannot be parsed.
  """
  config = LintConfig(pair_funcs=list(pair_funcs), assume_pairs=list(assume_pairs))
  engine = PairsEngine.from_config(config)
  result = engine.run(code, module=module)

  if not result.success:
    raise ValueError("\n".join(result.errors))

  return [d.format() for d in result.diagnostics]


__all__ = [
  "ConfigurationError",
  "Diagnostic",
  "LintConfig",
  "LintResult",
  "PairsEngine",
  "Registry",
  "lint",
  "__version__",
]
