"""
Import Deduplication Cache.

Remembers, per compilation unit, which polyfill imports were already injected
so that repeated requests (from any provider, at any location) reuse the
first binding instead of emitting a second statement.
"""

import logging
from typing import Callable, Dict, List, Tuple

import libcst as cst

from inject_polyfills.core.statements import InjectedStatement

logger = logging.getLogger(__name__)

# Export names reserved for the two anonymous import flavors.
SIDE_EFFECT = ""
DEFAULT_EXPORT = "<default>"

StatementBuilder = Callable[[bool, str, str], InjectedStatement]


class ImportsCache:
  """
  Deduplicating store of injected statements.

  Keys are ``(program, specifier, export)``; the program is the module node
  the statement is injected into.
  """

  def __init__(self) -> None:
    self._bindings: Dict[Tuple[cst.Module, str, str], str] = {}
    self._statements: Dict[cst.Module, List[InjectedStatement]] = {}

  def store(
    self,
    program: cst.Module,
    is_script: bool,
    specifier: str,
    export: str,
    build: StatementBuilder,
  ) -> str:
    """
    Returns the binding for ``specifier``/``export``, injecting it on first use.

    Args:
        program: The module receiving the statement.
        is_script: Module-system mode forwarded to ``build``.
        specifier: The module to import.
        export: Exported name, :data:`SIDE_EFFECT` or :data:`DEFAULT_EXPORT`.
        build: Called once per key with ``(is_script, specifier, export)``.

    Returns:
        str: The local binding name ("" for side-effect imports).
    """
    key = (program, specifier, export)
    if key in self._bindings:
      return self._bindings[key]

    statement = build(is_script, specifier, export)
    self._bindings[key] = statement.binding
    self._statements.setdefault(program, []).append(statement)
    logger.debug("Injecting %r from %r as %r", export, specifier, statement.binding)
    return statement.binding

  def statements(self, program: cst.Module) -> List[InjectedStatement]:
    """The statements injected into ``program``, in request order."""
    return list(self._statements.get(program, ()))

  def __len__(self) -> int:
    return len(self._bindings)
