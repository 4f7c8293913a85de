"""
Central Logging and Console Utilities.

Routes the standard ``logging`` library through ``rich``. Library modules log
with ``logging.getLogger(__name__)``; the command line reports through the
``log_*`` helpers below, which share the same handler.

Attributes:
    console (Console): The Rich console used for CLI output (stderr, so that
        transformed code written to stdout stays clean).
"""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

# Custom level between INFO and WARNING
SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "path": "bold blue",
    "code": "bold magenta",
  }
)

console = Console(theme=_THEME, stderr=True)


def configure_logging(verbose: bool = False) -> None:
  """
  Installs a single RichHandler on the root logger.

  Args:
      verbose: If True, log DEBUG records (provider registration, dispatch,
          injected imports); otherwise INFO and above.
  """
  root_logger = logging.getLogger()
  for handler in list(root_logger.handlers):
    if isinstance(handler, RichHandler):
      root_logger.removeHandler(handler)

  root_logger.addHandler(
    RichHandler(
      console=console,
      show_time=False,
      show_path=False,
      markup=True,
      rich_tracebacks=True,
    )
  )
  root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def log_success(msg: str) -> None:
  """Logs a success message."""
  logging.log(SUCCESS_LEVEL_NUM, f"✅ {msg}", extra={"markup": True})


def log_error(msg: str) -> None:
  """Logs an error message."""
  logging.error(f"❌ {msg}", extra={"markup": True})
