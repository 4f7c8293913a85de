"""
Dispatch Coordinator.

Feeds usage reports to the registered providers in registration order. A
provider owns a report exclusively once it signals so, either by returning
:attr:`Outcome.HANDLED` or by returning a replacement for the anchor node;
later providers are then skipped for that report.
"""

import logging
from typing import Any, Callable, List

import libcst as cst

from inject_polyfills.core.reports import UsageReport
from inject_polyfills.core.unit import CompilationUnit
from inject_polyfills.enums import Method, Outcome

logger = logging.getLogger(__name__)


def apply_outcome(unit: CompilationUnit, anchor: cst.CSTNode, result: Any) -> Outcome:
  """
  Normalizes a provider return value, scheduling replacements.

  Args:
      unit: The unit owning ``anchor``.
      anchor: The node the report is centered on.
      result: None, an :class:`Outcome`, a replacement node/sentinel, or a
          callable building the replacement from the updated anchor.

  Returns:
      Outcome: The normalized outcome.

  Raises:
      TypeError: If ``result`` is none of the accepted values.
  """
  if result is None:
    return Outcome.NOT_APPLICABLE
  if isinstance(result, Outcome):
    return result
  if isinstance(result, (cst.CSTNode, cst.RemovalSentinel, cst.FlattenSentinel)):
    unit.replace(anchor, result)
    return Outcome.HANDLED
  if callable(result):
    unit.replace(anchor, result)
    return Outcome.HANDLED
  raise TypeError(f"Unsupported provider result: {result!r}")


class Dispatcher:
  """
  Calls every provider's method callback for each report.

  Attributes:
      providers: Provider instances in registration order.
      method: The configured method, selecting the callback.
  """

  def __init__(self, providers: List[Any], method: Method, get_utils: Callable[[cst.CSTNode], Any]):
    self.providers = providers
    self.method = method
    self._get_utils = get_utils

  def dispatch(self, unit: CompilationUnit, report: UsageReport, anchor: cst.CSTNode) -> Outcome:
    """
    Delivers ``report`` to the providers until one handles it.

    Args:
        unit: The unit being transformed.
        report: The usage report.
        anchor: The node the report is centered on.

    Returns:
        Outcome: HANDLED if a provider claimed the report, else the outcome of
        the last provider.
    """
    utils = self._get_utils(anchor)
    outcome = Outcome.NOT_APPLICABLE

    for provider in self.providers:
      callback = getattr(provider, self.method.attribute)
      outcome = apply_outcome(unit, anchor, callback(report, utils, anchor))
      if outcome == Outcome.HANDLED:
        logger.debug("%s handled by %s", report, getattr(provider, "name", None) or type(provider).__name__)
        break

    return outcome
