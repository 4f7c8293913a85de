"""
Source Resolution.

Answers "what object does this expression ultimately refer to" for the usage
detector. Resolution is a pure function of the node and the libcst metadata
computed once per compilation unit (scopes, qualified names, parents); an
ambiguous node resolves to :data:`UNRESOLVED` rather than raising.
"""

from typing import Mapping, Optional, Union

import libcst as cst
from libcst.metadata import BuiltinAssignment, QualifiedNameSource, Scope

from inject_polyfills.core.reports import UNRESOLVED, ResolvedSource
from inject_polyfills.enums import Placement

# Literal node types and the builtin type their values are instances of.
_LITERAL_TYPES = (
  ((cst.SimpleString, cst.ConcatenatedString), None),
  ((cst.FormattedString,), "str"),
  ((cst.Integer,), "int"),
  ((cst.Float,), "float"),
  ((cst.Imaginary,), "complex"),
  ((cst.List, cst.ListComp), "list"),
  ((cst.Dict, cst.DictComp), "dict"),
  ((cst.Set, cst.SetComp), "set"),
  ((cst.Tuple,), "tuple"),
  ((cst.GeneratorExp,), "generator"),
  ((cst.Lambda,), "function"),
)

REQUIRE_FUNCTIONS = frozenset({"importlib.import_module"})


def get_full_name(node: Union[cst.Name, cst.Attribute]) -> str:
  """
  Flattens a Name or Attribute chain into a dotted string.

  Args:
      node: The CST node (e.g. ``Attribute(Name("os"), Name("path"))``).

  Returns:
      str: The dotted path (``"os.path"``), or an empty string for any other
      node shape.
  """
  if isinstance(node, cst.Name):
    return node.value
  if isinstance(node, cst.Attribute):
    base = get_full_name(node.value)
    return f"{base}.{node.attr.value}" if base else ""
  return ""


def _string_value(node: cst.CSTNode) -> Optional[str]:
  if isinstance(node, (cst.SimpleString, cst.ConcatenatedString)):
    value = node.evaluated_value
    if isinstance(value, str):
      return value
  return None


class SourceResolver:
  """
  Resolves expressions of one module to canonical identities.

  Attributes:
      scopes: ScopeProvider metadata for the module.
      qualified_names: QualifiedNameProvider metadata for the module.
      parents: ParentNodeProvider metadata for the module.
  """

  def __init__(
    self,
    scopes: Mapping[cst.CSTNode, Optional[Scope]],
    qualified_names: Mapping[cst.CSTNode, object],
    parents: Mapping[cst.CSTNode, cst.CSTNode],
  ):
    self.scopes = scopes
    self.qualified_names = qualified_names
    self.parents = parents

  def parent(self, node: cst.CSTNode) -> Optional[cst.CSTNode]:
    """Returns the parent of ``node``, or None for the module itself."""
    return self.parents.get(node)

  def is_unbound(self, node: cst.Name) -> bool:
    """
    Checks whether a Name is a reference with no local binding.

    Only nodes recorded as scope accesses qualify, so attribute names,
    keyword names and assignment targets are never unbound. An access whose
    referents are all builtins (or that has no referents at all) is unbound.

    Args:
        node: The Name node.

    Returns:
        bool: True if the name refers to a global.
    """
    scope = self.scopes.get(node)
    if scope is None:
      return False
    for access in scope.accesses[node]:
      if access.node is node:
        return all(isinstance(ref, BuiltinAssignment) for ref in access.referents)
    return False

  def is_builtin_call(self, node: cst.CSTNode, name: str) -> bool:
    """True if ``node`` is a call to the unbound builtin ``name``."""
    if not isinstance(node, cst.Call) or not isinstance(node.func, cst.Name):
      return False
    return node.func.value == name and self.is_unbound(node.func)

  def qualified_name(self, node: cst.CSTNode) -> Optional[str]:
    """
    Returns the import-derived qualified name of ``node``.

    Args:
        node: A Name or Attribute.

    Returns:
        Optional[str]: e.g. ``"numpy.linalg"`` for ``np.linalg`` after
        ``import numpy as np``; None when the node is not bound by exactly one
        import.
    """
    if not isinstance(node, (cst.Name, cst.Attribute)):
      return None
    qset = self.qualified_names.get(node)
    if not qset:
      return None
    if callable(qset):
      qset = qset()
    names = [q.name for q in qset if q.source == QualifiedNameSource.IMPORT]
    if len(names) == 1:
      return names[0]
    return None

  def resolve_source(self, node: cst.BaseExpression) -> ResolvedSource:
    """
    Resolves the object an expression denotes.

    ``X.__dict__`` and ``vars(X)`` resolve as ``X`` itself: they expose the
    namespace of ``X`` rather than a member of it.

    Args:
        node: The expression.

    Returns:
        ResolvedSource: identity and placement, or :data:`UNRESOLVED`.
    """
    if isinstance(node, cst.Attribute) and node.attr.value == "__dict__":
      return self.resolve_source(node.value)
    if self.is_builtin_call(node, "vars") and len(node.args) == 1 and not node.args[0].star:
      return self.resolve_source(node.args[0].value)

    resolved = self._resolve_id(node)
    if resolved.resolved:
      return resolved

    for types, type_name in _LITERAL_TYPES:
      if isinstance(node, types):
        if type_name is None:
          value = node.evaluated_value
          if value is None:
            return UNRESOLVED
          type_name = "str" if isinstance(value, str) else "bytes"
        return ResolvedSource(type_name, Placement.INSTANCE)
    return UNRESOLVED

  def _resolve_id(self, node: cst.BaseExpression) -> ResolvedSource:
    if isinstance(node, cst.Name):
      if self.is_unbound(node):
        return ResolvedSource(node.value, Placement.GLOBAL)
      qualified = self.qualified_name(node)
      if qualified:
        return ResolvedSource(qualified, Placement.IMPORTED)
      return UNRESOLVED

    if isinstance(node, cst.Attribute):
      qualified = self.qualified_name(node)
      if qualified:
        return ResolvedSource(qualified, Placement.IMPORTED)
      base = self._resolve_id(node.value)
      if base.resolved:
        return ResolvedSource(f"{base.id}.{node.attr.value}", base.placement)
    return UNRESOLVED

  def resolve_key(self, node: cst.CSTNode, computed: bool = False) -> Optional[str]:
    """
    Statically resolves a member key.

    Args:
        node: The key expression (an attribute Name or a string argument).
        computed: True when the key is an evaluated expression (``getattr``
            arguments, ``in`` operands) rather than a literal attribute name.

    Returns:
        Optional[str]: The key, or None if it cannot be known statically.
    """
    value = _string_value(node)
    if value is not None:
      return value
    if isinstance(node, cst.Name) and not computed:
      return node.value
    return None

  def get_import_source(self, node: cst.BaseSmallStatement) -> Optional[str]:
    """
    Returns the module of a bare ``import pkg.mod`` statement.

    Imports with several names or an ``as`` alias are not bare imports.
    """
    if not isinstance(node, cst.Import) or len(node.names) != 1:
      return None
    alias = node.names[0]
    if alias.asname is not None:
      return None
    return get_full_name(alias.name) or None

  def get_require_source(self, node: cst.BaseSmallStatement) -> Optional[str]:
    """
    Returns the module loaded by a ``__import__("pkg")`` or
    ``importlib.import_module("pkg")`` expression statement.
    """
    if not isinstance(node, cst.Expr) or not isinstance(node.value, cst.Call):
      return None
    call = node.value
    if not (self.is_builtin_call(call, "__import__") or self.qualified_name(call.func) in REQUIRE_FUNCTIONS):
      return None
    if len(call.args) != 1:
      return None
    arg = call.args[0]
    if arg.keyword is not None or arg.star:
      return None
    return _string_value(arg.value)
