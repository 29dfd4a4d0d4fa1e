"""
Console and Logging Setup.

All user-facing output goes through one rich `Console`:

-   Diagnostics are printed on it directly (`console.print`).
-   Progress and errors are `logging` records of the ``pairlint`` logger,
    rendered on the same console by a `RichHandler`.

The console sits behind a proxy so tests can swap in a recording console with
`set_console` while modules keep their ``from ... import console`` reference.

Attributes:
    console (_ConsoleProxy): Stable reference to the active Rich Console.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

LOGGER_NAME = "pairlint"
SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_THEME = Theme(
  {
    "logging.level.success": "green",
    "diagnostic.location": "bold blue",
  }
)

_logger = logging.getLogger(LOGGER_NAME)


def _new_console() -> Console:
  return Console(theme=_THEME)


class _ConsoleProxy:
  """
  Forwards to a swappable backend console.

  Every backend swap re-binds the ``pairlint`` logger handler, so module
  loggers (``pairlint.core.engine``, ...) follow the active console.
  """

  def __init__(self) -> None:
    self._backend = _new_console()
    self._bind_logger()

  @property
  def backend(self) -> Console:
    return self._backend

  def swap(self, backend: Console) -> None:
    """
    Makes `backend` the destination of prints and log records.

    Args:
        backend (Console): e.g. ``Console(record=True)`` in tests.
    """
    self._backend = backend
    self._bind_logger()

  def _bind_logger(self) -> None:
    for handler in list(_logger.handlers):
      if isinstance(handler, RichHandler):
        _logger.removeHandler(handler)

    _logger.addHandler(
      RichHandler(
        console=self._backend,
        show_time=False,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
      )
    )
    _logger.setLevel(logging.INFO)
    # Records are rendered here only; the root logger stays untouched
    _logger.propagate = False

  def print(self, *args: Any, **kwargs: Any) -> None:
    self._backend.print(*args, **kwargs)

  def export_text(self, **kwargs: Any) -> str:
    """Text recorded so far (requires a ``record=True`` backend)."""
    return self._backend.export_text(**kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Redirects console output and logging to `new_console`.

  Args:
      new_console (Console): The Rich console to use from now on.
  """
  console.swap(new_console)


def reset_console() -> None:
  """Restores a fresh stdout console."""
  console.swap(_new_console())


def set_verbose(enabled: bool) -> None:
  """Shows debug records (e.g. calls skipped for star-args) when enabled."""
  _logger.setLevel(logging.DEBUG if enabled else logging.INFO)


def log_info(msg: str) -> None:
  """
  Logs a progress message.

  Args:
      msg (str): May contain rich markup; escape user-supplied text first.
  """
  _logger.info(msg)


def log_success(msg: str) -> None:
  _logger.log(SUCCESS_LEVEL_NUM, msg)


def log_warning(msg: str) -> None:
  _logger.warning(msg)


def log_error(msg: str) -> None:
  """
  Logs a fatal problem (bad configuration, unreadable file).

  Args:
      msg (str): May contain rich markup; escape user-supplied text first.
  """
  _logger.error(msg)
