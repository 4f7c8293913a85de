"""
inject-polyfills Package.

Detects, symbol by symbol, which standard-library or builtin features a
Python module uses and asks pluggable providers to inject a polyfill import
for them, exactly once per file.

Usage
-----

.. code-block:: python

    import inject_polyfills as ip

    code = "group = ExceptionGroup('boom', errors)"
    print(ip.transform(code, method="usage-pure", providers=["python-backports"], targets=">=3.8"))
    # from exceptiongroup import ExceptionGroup as _ExceptionGroup
    # group = _ExceptionGroup('boom', errors)

Writing a provider
^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from inject_polyfills import PolyfillProvider, register_provider

    class MyProvider(PolyfillProvider):
      name = "mine"

      def usage_global(self, report, utils, anchor):
        if report.kind == "global" and report.name == "anext":
          utils.inject_global_import("my_polyfills.anext")

    @register_provider("mine")
    def create(api, options):
      return MyProvider()
"""

from typing import Any, Optional

from inject_polyfills.config import PluginConfig
from inject_polyfills.core.registry import PolyfillProvider, ProviderApi, register_provider
from inject_polyfills.enums import Method, Outcome, Placement, SourceType
from inject_polyfills.errors import ConfigurationError
from inject_polyfills.plugin import PolyfillPlugin

__version__ = "0.1.0"


def transform(code: str, source_type: Optional[SourceType] = None, **options: Any) -> str:
  """
  Applies a freshly configured plugin to a string of Python code.

  Args:
      code (str): The source code.
      source_type (SourceType, optional): Module-system mode of the code.
      **options: PluginConfig fields (``method``, ``providers``, ``targets``...).

  Returns:
      str: The transformed source code.

  Raises:
      ConfigurationError: If the options are invalid.
  """
  plugin = PolyfillPlugin(PluginConfig(**options))
  return plugin.transform(code, source_type)


__all__ = [
  "ConfigurationError",
  "Method",
  "Outcome",
  "Placement",
  "PluginConfig",
  "PolyfillPlugin",
  "PolyfillProvider",
  "ProviderApi",
  "SourceType",
  "register_provider",
  "transform",
  "__version__",
]
