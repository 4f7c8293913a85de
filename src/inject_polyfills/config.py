"""
Plugin Configuration Store.

Holds the raw configuration of a :class:`~inject_polyfills.plugin.PolyfillPlugin`
and loads it from the ``[tool.inject_polyfills]`` table of the nearest
``pyproject.toml``. Fields are deliberately permissive: semantic validation
(method names, provider lists, target specifiers) happens when the plugin is
constructed and fails with :class:`~inject_polyfills.errors.ConfigurationError`.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from inject_polyfills.enums import SourceType

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib

logger = logging.getLogger(__name__)

TOOL_SECTION = "inject_polyfills"


class PluginConfig(BaseModel):
  """
  Configuration container for the polyfill plugin.
  """

  model_config = ConfigDict(arbitrary_types_allowed=True)

  method: Any = Field(None, description="One of 'entry-global', 'usage-global' or 'usage-pure'.")
  providers: Any = Field(
    default_factory=list,
    description="Provider factories, names, import paths, or [provider, options] pairs.",
  )
  targets: Any = Field(None, description="Python version specifier(s); defaults to requires-python.")
  ignore_project_config: bool = Field(False, description="If True, ignore requires-python in pyproject.toml.")
  config_path: Optional[Path] = Field(None, description="Where to look for pyproject.toml.")
  source_type: SourceType = Field(SourceType.MODULE, description="Default module-system mode of transformed files.")

  @classmethod
  def load(cls, search_path: Optional[Path] = None, **overrides: Any) -> "PluginConfig":
    """
    Loads configuration from pyproject.toml and applies explicit overrides.

    Args:
        search_path: Directory to start searching for pyproject.toml.
        **overrides: Field values taking precedence over the file. None
            values are ignored.

    Returns:
        PluginConfig: The resolved configuration.
    """
    data, location = find_pyproject(search_path or Path.cwd())
    settings: Dict[str, Any] = dict(data.get("tool", {}).get(TOOL_SECTION, {}))

    if location and "config_path" not in settings:
      settings["config_path"] = location
    elif location and settings.get("config_path"):
      settings["config_path"] = (location.parent / settings["config_path"]).resolve()

    settings.update({k: v for k, v in overrides.items() if v is not None})
    return cls(**settings)


def find_pyproject(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches ``start_path`` and its parents for a ``pyproject.toml``.

  Args:
      start_path: A directory, or a file whose directory starts the search.
          A path to a toml file is read directly.

  Returns:
      Tuple[Dict, Optional[Path]]: The parsed document and its location, or
      an empty dict and None when nothing is found or the file is invalid.
  """
  current = start_path.resolve()
  if current.is_file() and current.suffix == ".toml":
    candidates = [current]
  else:
    if current.is_file():
      current = current.parent
    candidates = [parent / "pyproject.toml" for parent in [current, *current.parents]]

  for toml_path in candidates:
    if toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          return tomllib.load(f), toml_path
      except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring unreadable %s: %s", toml_path, e)
        return {}, None

  return {}, None
