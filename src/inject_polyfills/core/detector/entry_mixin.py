"""
Entry Detection Mixin.

Reports the modules a file loads at top level: bare ``import pkg.mod``
statements and ``__import__("pkg")`` / ``importlib.import_module("pkg")``
expression statements. Nested imports are ignored.
"""

from typing import Optional

import libcst as cst

from inject_polyfills.core.reports import ImportUsage


class EntryMixin(cst.CSTTransformer):
  """
  Mixin for the ``entry-global`` method.
  """

  def visit_Module(self, node: cst.Module) -> Optional[bool]:
    """
    Reports every top-level import, anchored at its statement line.
    """
    for stmt in node.body:
      if not isinstance(stmt, cst.SimpleStatementLine):
        continue
      for small in stmt.body:
        source = self.resolver.get_import_source(small) or self.resolver.get_require_source(small)
        if source:
          self._report(ImportUsage(source), stmt)
          if stmt in self.unit.replacements:
            break
    return True
