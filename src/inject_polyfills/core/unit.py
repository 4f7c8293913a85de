"""
Compilation Unit State.

Everything that is mutable while one module is transformed lives here: the
metadata-backed resolver, the import cache, the usage-site replacements
requested by providers, and the binding names generated so far. A unit is
created for every transformed module and discarded afterwards, so nothing
leaks between files even when the plugin is reused.
"""

import re
from typing import Callable, Dict, List, Set, Union

import libcst as cst
from libcst.metadata import MetadataWrapper, ParentNodeProvider, QualifiedNameProvider, ScopeProvider

from inject_polyfills.core.imports_cache import ImportsCache
from inject_polyfills.core.resolver import SourceResolver
from inject_polyfills.enums import InsertionPoint, SourceType

Replacement = Union[
  cst.CSTNode,
  cst.RemovalSentinel,
  cst.FlattenSentinel,
  Callable[[cst.CSTNode], Union[cst.CSTNode, cst.RemovalSentinel, cst.FlattenSentinel]],
]


class _NameCollector(cst.CSTVisitor):
  """Collects every identifier spelled anywhere in a module."""

  def __init__(self) -> None:
    self.names: Set[str] = set()

  def visit_Name(self, node: cst.Name) -> None:
    self.names.add(node.value)


def is_docstring(node: cst.CSTNode, idx: int) -> bool:
  """
  Determines if a statement node represents a module docstring.

  Args:
      node: The statement node from the module body.
      idx: The index of this statement in the body list.

  Returns:
      bool: True if it is a docstring (string expression at index 0).
  """
  if idx != 0 or not isinstance(node, cst.SimpleStatementLine):
    return False
  if len(node.body) == 1 and isinstance(node.body[0], cst.Expr):
    return isinstance(node.body[0].value, (cst.SimpleString, cst.ConcatenatedString))
  return False


def is_future_import(node: cst.CSTNode) -> bool:
  """
  Determines if a statement is a ``from __future__ import ...`` directive.
  """
  if isinstance(node, cst.SimpleStatementLine):
    for small_stmt in node.body:
      if isinstance(small_stmt, cst.ImportFrom) and isinstance(small_stmt.module, cst.Name):
        if small_stmt.module.value == "__future__":
          return True
  return False


class CompilationUnit:
  """
  Per-module state of one transformation.

  Attributes:
      module: The module being transformed (the traversal root).
      source_type: Module-system mode of the unit.
      resolver: Source resolver over the module's metadata.
      cache: Import cache scoped to this unit.
      replacements: Usage-site rewrites requested by providers.
  """

  def __init__(self, module: cst.Module, source_type: SourceType = SourceType.MODULE):
    wrapper = MetadataWrapper(module, unsafe_skip_copy=True)
    metadata = wrapper.resolve_many({ScopeProvider, QualifiedNameProvider, ParentNodeProvider})

    self.module = wrapper.module
    self.source_type = SourceType(source_type)
    self.resolver = SourceResolver(
      metadata[ScopeProvider],
      metadata[QualifiedNameProvider],
      metadata[ParentNodeProvider],
    )
    self.cache = ImportsCache()
    self.replacements: Dict[cst.CSTNode, Replacement] = {}

    collector = _NameCollector()
    self.module.visit(collector)
    self._taken_names = collector.names

  @property
  def is_script(self) -> bool:
    """True if injected imports must use the ``__import__`` form."""
    return self.source_type == SourceType.SCRIPT

  def contains(self, node: cst.CSTNode) -> bool:
    """True if ``node`` belongs to this unit's original tree."""
    return node is self.module or node in self.resolver.parents

  def generate_binding(self, hint: str) -> str:
    """
    Generates a module-unique private identifier from ``hint``.

    ``"functools.cache"`` becomes ``_functools_cache``, then
    ``_functools_cache2`` and so on while the name is taken.

    Args:
        hint: Any string; non-identifier characters are replaced.

    Returns:
        str: A name not spelled anywhere in the module nor generated before.
    """
    base = re.sub(r"\W+", "_", hint).lstrip("_")
    base = re.sub(r"\d+$", "", base) or "ref"

    candidate = f"_{base}"
    counter = 1
    while candidate in self._taken_names:
      counter += 1
      candidate = f"_{base}{counter}"

    self._taken_names.add(candidate)
    return candidate

  def replace(self, anchor: cst.CSTNode, replacement: Replacement) -> None:
    """
    Schedules ``anchor`` to be replaced when the traversal leaves it.

    A callable replacement is called with the updated anchor, so rewrites made
    inside the anchor are kept.
    """
    self.replacements[anchor] = replacement

  def inject_statements(self, module: cst.Module) -> cst.Module:
    """
    Inserts the cached statements into the transformed module.

    Statements go after the docstring and ``__future__`` imports; hoisted ones
    first, each group in request order.

    Args:
        module: The transformed module (the traversal result).

    Returns:
        cst.Module: The module with injected statements.
    """
    statements = self.cache.statements(self.module)
    if not statements:
      return module

    ordered: List[cst.SimpleStatementLine] = [s.node for s in statements if s.insertion == InsertionPoint.HOISTED]
    ordered += [s.node for s in statements if s.insertion == InsertionPoint.HEADER]

    body = list(module.body)
    insert_idx = 0
    for i, stmt in enumerate(body):
      if is_docstring(stmt, i) or is_future_import(stmt):
        insert_idx = i + 1
        continue
      break

    return module.with_changes(body=body[:insert_idx] + ordered + body[insert_idx:])
