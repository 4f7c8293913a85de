"""
Base Detector Logic.

Defines the transformer shared by both traversal modes: report dispatch,
provider-contributed matchers, application of usage-site replacements and
final injection of the cached import statements.
"""

from typing import Any, Callable, List, Sequence, Tuple, Union

import libcst as cst
import libcst.matchers as m

from inject_polyfills.core.dispatch import Dispatcher, apply_outcome
from inject_polyfills.core.registry import MatcherCallback
from inject_polyfills.core.reports import UsageReport
from inject_polyfills.core.unit import CompilationUnit


class BaseDetector(cst.CSTTransformer):
  """
  Base class for usage detection over one compilation unit.

  Manages the dispatcher, the merged provider matchers and the unit whose
  replacements and injections are applied on the way out of the tree.
  """

  def __init__(
    self,
    unit: CompilationUnit,
    dispatcher: Dispatcher,
    get_utils: Callable[[cst.CSTNode], Any],
    matchers: Sequence[Tuple[m.BaseMatcherNode, MatcherCallback]] = (),
  ):
    """
    Initializes the detector state.

    Args:
        unit: The compilation unit to traverse.
        dispatcher: Delivers reports to the providers.
        get_utils: Returns the injection utils for an anchor node.
        matchers: Provider matchers, in provider registration order.
    """
    super().__init__()
    self.unit = unit
    self.resolver = unit.resolver
    self.dispatcher = dispatcher
    self._get_utils = get_utils
    self._matchers: List[Tuple[m.BaseMatcherNode, MatcherCallback]] = list(matchers)

  def _report(self, report: UsageReport, anchor: cst.CSTNode) -> None:
    self.dispatcher.dispatch(self.unit, report, anchor)

  def on_visit(self, node: cst.CSTNode) -> bool:
    """
    Runs the mode-specific visitors, then the provider matchers.
    """
    result = super().on_visit(node)
    for matcher, callback in self._matchers:
      if m.matches(node, matcher):
        apply_outcome(self.unit, node, callback(node, self._get_utils(node)))
    return result

  def on_leave(
    self, original_node: cst.CSTNode, updated_node: cst.CSTNode
  ) -> Union[cst.CSTNode, cst.RemovalSentinel, cst.FlattenSentinel]:
    """
    Substitutes the replacement a provider scheduled for ``original_node``.

    Callable replacements receive the updated node.
    """
    result = super().on_leave(original_node, updated_node)
    replacement = self.unit.replacements.get(original_node)
    if replacement is None:
      return result
    if callable(replacement):
      return replacement(result)
    return replacement

  def leave_Module(self, original_node: cst.Module, updated_node: cst.Module) -> cst.Module:
    """
    Injects the statements requested during the traversal.
    """
    return self.unit.inject_statements(updated_node)
