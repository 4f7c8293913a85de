"""
Error types raised by inject-polyfills.
"""


class ConfigurationError(ValueError):
  """
  Raised when the plugin configuration is invalid.

  Always raised while the plugin is being constructed, before any module is
  traversed.
  """
