"""
Usage Detection Mixin.

Recognizes the syntactic shapes through which a global API is referenced:

1.  **Bare references**: a name with no local binding (``anext(it)``).
2.  **Member access**: ``obj.key`` and ``getattr(obj, "key")``.
3.  **Destructuring**: ``from pkg import a, b`` and
    ``operator.attrgetter("a", "b")(obj)``.
4.  **Membership tests**: ``"key" in obj`` and ``hasattr(obj, "key")``.

Each match becomes a usage report dispatched to the providers.
"""

from typing import List, Optional

import libcst as cst

from inject_polyfills.core.reports import UNRESOLVED, GlobalUsage, MembershipUsage, PropertyUsage, ResolvedSource
from inject_polyfills.core.resolver import get_full_name
from inject_polyfills.enums import Placement

# Keys exposing an object's namespace rather than one of its members.
IGNORED_KEYS = frozenset({"__dict__"})

ATTRGETTER = "operator.attrgetter"


def _positional(call: cst.Call) -> List[cst.Arg]:
  args = [arg for arg in call.args if arg.keyword is None]
  if any(arg.star for arg in args):
    return []
  return args


class UsageMixin(cst.CSTTransformer):
  """
  Mixin for the ``usage-global`` and ``usage-pure`` methods.
  """

  def _property(self, source: ResolvedSource, key: str, anchor: cst.CSTNode) -> None:
    self._report(PropertyUsage(source.id, key, source.placement), anchor)

  def _membership(self, source: ResolvedSource, key: str, anchor: cst.CSTNode) -> None:
    self._report(MembershipUsage(source.id, key, source.placement), anchor)

  def visit_Name(self, node: cst.Name) -> Optional[bool]:
    """Reports unbound names, e.g. ``ExceptionGroup``."""
    if self.resolver.is_unbound(node):
      self._report(GlobalUsage(node.value), node)
    return True

  def visit_Attribute(self, node: cst.Attribute) -> Optional[bool]:
    """Reports ``obj.key``."""
    key = self.resolver.resolve_key(node.attr)
    if key and key not in IGNORED_KEYS:
      self._property(self.resolver.resolve_source(node.value), key, node)
    return True

  def visit_Call(self, node: cst.Call) -> Optional[bool]:
    """
    Reports the call forms of member access, membership and destructuring.
    """
    if self.resolver.is_builtin_call(node, "getattr"):
      args = _positional(node)
      if len(args) in (2, 3):
        key = self.resolver.resolve_key(args[1].value, computed=True)
        if key and key not in IGNORED_KEYS:
          self._property(self.resolver.resolve_source(args[0].value), key, node)

    elif self.resolver.is_builtin_call(node, "hasattr"):
      args = _positional(node)
      if len(args) == 2:
        key = self.resolver.resolve_key(args[1].value, computed=True)
        if key:
          self._membership(self.resolver.resolve_source(args[0].value), key, node)

    elif self.resolver.qualified_name(node.func) == ATTRGETTER:
      self._attrgetter(node)

    return True

  def _attrgetter(self, node: cst.Call) -> None:
    # attrgetter("a", "b")(obj): the getter's only argument is the source
    source = UNRESOLVED
    parent = self.resolver.parent(node)
    if isinstance(parent, cst.Call) and parent.func is node:
      args = _positional(parent)
      if len(args) == 1 and len(parent.args) == 1:
        source = self.resolver.resolve_source(args[0].value)

    for arg in _positional(node):
      key = self.resolver.resolve_key(arg.value, computed=True)
      if key and key.isidentifier():
        self._property(source, key, arg)

  def visit_ImportFrom(self, node: cst.ImportFrom) -> Optional[bool]:
    """
    Reports every name pulled out of a module, anchored at its alias.

    Star imports are skipped; relative imports have an unresolved source.
    """
    if isinstance(node.names, cst.ImportStar):
      return True

    source = UNRESOLVED
    if not node.relative and node.module is not None:
      source = ResolvedSource(get_full_name(node.module), Placement.IMPORTED)

    for alias in node.names:
      key = self.resolver.resolve_key(alias.name)
      if key:
        self._property(source, key, alias)
    return True

  def visit_Comparison(self, node: cst.Comparison) -> Optional[bool]:
    """Reports ``"key" in obj`` (and ``not in``) for every link of the chain."""
    left = node.left
    for target in node.comparisons:
      if isinstance(target.operator, (cst.In, cst.NotIn)):
        key = self.resolver.resolve_key(left, computed=True)
        if key:
          self._membership(self.resolver.resolve_source(target.comparator), key, node)
      left = target.comparator
    return True
