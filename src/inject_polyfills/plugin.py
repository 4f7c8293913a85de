"""
Plugin Entry Point.

The :class:`PolyfillPlugin` is built once from configuration and then applied
to any number of modules. Construction validates everything (method,
providers, targets) so an invalid configuration fails before the first tree
is visited. Each transformed module gets its own
:class:`~inject_polyfills.core.unit.CompilationUnit`; the plugin itself keeps
no per-file state beyond the stack of units currently being transformed.
"""

import logging
from typing import Any, Dict, List, Optional, Union

import libcst as cst

from inject_polyfills.config import PluginConfig
from inject_polyfills.core.detector import detector_for
from inject_polyfills.core.dispatch import Dispatcher
from inject_polyfills.core.injection import InjectionUtils
from inject_polyfills.core.registry import build_providers, create_provider_descriptors, resolve_method
from inject_polyfills.core.targets import resolve_targets
from inject_polyfills.core.unit import CompilationUnit
from inject_polyfills.enums import SourceType

logger = logging.getLogger(__name__)


class PolyfillPlugin:
  """
  Detects standard-library usage and injects polyfill imports.

  Attributes:
      name: Plugin name.
      config: The configuration the plugin was built from.
      method: The validated polyfilling method.
      targets: The resolved target set.
      providers: Provider instances in dispatch order.
  """

  name = "inject-polyfills"

  def __init__(self, config: Union[PluginConfig, Dict[str, Any], None] = None, **options: Any):
    """
    Validates the configuration and builds the providers.

    Args:
        config: A PluginConfig or a mapping of its fields.
        **options: Field values, used when ``config`` is omitted.

    Raises:
        ConfigurationError: If the method, providers or targets are invalid.
    """
    if config is None:
      config = PluginConfig(**options)
    elif not isinstance(config, PluginConfig):
      config = PluginConfig(**dict(config))

    self.config = config
    self.method = resolve_method(config.method)
    descriptors = create_provider_descriptors(config.providers)
    self.targets = resolve_targets(config.targets, config.ignore_project_config, config.config_path)
    self.providers = build_providers(descriptors, self.method, self.targets, self.get_utils)

    self._units: List[CompilationUnit] = []
    self._dispatcher = Dispatcher(self.providers, self.method, self.get_utils)
    self._matchers = [pair for provider in self.providers for pair in getattr(provider, "matchers", None) or ()]
    logger.debug("%s: %s with %d provider(s), targets %s", self.name, self.method.value, len(self.providers), self.targets)

  def get_utils(self, anchor: cst.CSTNode) -> InjectionUtils:
    """
    Returns the injection utils for the unit containing ``anchor``.

    Args:
        anchor: A node of a module currently being transformed.

    Returns:
        InjectionUtils: Utils bound to that module.

    Raises:
        LookupError: If no active unit contains ``anchor``.
    """
    for unit in reversed(self._units):
      if unit.contains(anchor):
        return InjectionUtils(unit)
    raise LookupError(f"{type(anchor).__name__} node is not part of a module being transformed")

  def transform_module(self, module: cst.Module, source_type: Optional[SourceType] = None) -> cst.Module:
    """
    Applies the plugin to one parsed module.

    Args:
        module: The module to transform.
        source_type: Module-system mode; defaults to the configured one.

    Returns:
        cst.Module: The transformed module.
    """
    unit = CompilationUnit(module, source_type or self.config.source_type)
    detector = detector_for(self.method)(unit, self._dispatcher, self.get_utils, self._matchers)

    self._units.append(unit)
    try:
      return unit.module.visit(detector)
    finally:
      self._units.remove(unit)

  def transform(self, code: str, source_type: Optional[SourceType] = None) -> str:
    """
    Applies the plugin to Python source code.

    Args:
        code: The source text.
        source_type: Module-system mode; defaults to the configured one.

    Returns:
        str: The transformed source text.

    Raises:
        libcst.ParserSyntaxError: If ``code`` is not valid Python.
    """
    return self.transform_module(cst.parse_module(code), source_type).code
