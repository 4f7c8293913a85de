"""
Detector Package.

Provides the two LibCST transformers that recognize usage events and hand
them to the providers:

- ``EntryDetector``: the ``entry-global`` method (top-level imports only).
- ``UsageDetector``: the ``usage-global`` and ``usage-pure`` methods.

Both share :class:`BaseDetector` for dispatch, provider matchers,
replacements and import injection.
"""

from inject_polyfills.core.detector.base import BaseDetector
from inject_polyfills.core.detector.entry_mixin import EntryMixin
from inject_polyfills.core.detector.usage_mixin import UsageMixin
from inject_polyfills.enums import Method


class EntryDetector(EntryMixin, BaseDetector):
  """
  Composite transformer for entry-point polyfilling.
  """


class UsageDetector(UsageMixin, BaseDetector):
  """
  Composite transformer for usage-based polyfilling.
  """


def detector_for(method: Method) -> type:
  """Returns the detector class implementing ``method``."""
  return EntryDetector if method == Method.ENTRY_GLOBAL else UsageDetector


__all__ = ["BaseDetector", "EntryDetector", "UsageDetector", "detector_for"]
