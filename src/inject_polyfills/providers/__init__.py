"""
Providers Package.

Automatically discovers and registers all provider modules within this
package, so adding a file (e.g. ``my_backports.py``) that uses
``@register_provider`` makes it available by name without editing this file.
"""

import importlib
import logging
import pkgutil
from pathlib import Path

logger = logging.getLogger(__name__)

_pkg_dir = Path(__file__).parent

for _, module_name, _ in pkgutil.iter_modules([str(_pkg_dir)]):
  if module_name.startswith("_"):
    continue

  try:
    importlib.import_module(f".{module_name}", package=__name__)
  except ImportError as e:
    # one broken provider module must not hide the others
    logger.warning("Failed to auto-load provider '%s': %s", module_name, e)
