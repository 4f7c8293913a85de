"""
Injection Facade.

The ``utils`` object handed to providers with every usage report. Its three
injection operations all go through the unit's :class:`ImportsCache`, so
asking twice for the same import is free and always yields the same binding.
It also lends providers the unit's source resolver.
"""

from typing import Optional

import libcst as cst

from inject_polyfills.core import statements
from inject_polyfills.core.imports_cache import DEFAULT_EXPORT, SIDE_EFFECT
from inject_polyfills.core.reports import ResolvedSource
from inject_polyfills.core.unit import CompilationUnit


class InjectionUtils:
  """
  Import injection bound to one compilation unit.
  """

  def __init__(self, unit: CompilationUnit):
    self._unit = unit

  @property
  def source_type(self):
    """Module-system mode of the bound unit."""
    return self._unit.source_type

  def inject_global_import(self, specifier: str) -> None:
    """
    Injects a side-effect-only import of ``specifier``.

    Args:
        specifier: Dotted module path, e.g. ``"polyfills.anext"``.
    """
    statements.check_specifier(specifier)
    self._unit.cache.store(
      self._unit.module,
      self._unit.is_script,
      specifier,
      SIDE_EFFECT,
      lambda is_script, source, _: statements.side_effect_import(is_script, source),
    )

  def inject_named_import(self, specifier: str, name: str, hint: Optional[str] = None) -> str:
    """
    Injects ``name`` from ``specifier`` under a generated private binding.

    Args:
        specifier: Dotted module path.
        name: The exported attribute.
        hint: Seed for the binding name (defaults to ``name``).

    Returns:
        str: The local binding, e.g. ``"_cache"``.
    """
    statements.check_specifier(specifier)
    hint = name if hint is None else hint

    def build(is_script: bool, source: str, export: str) -> statements.InjectedStatement:
      return statements.named_import(is_script, source, export, self._unit.generate_binding(hint))

    return self._unit.cache.store(self._unit.module, self._unit.is_script, specifier, name, build)

  def inject_default_import(self, specifier: str, hint: Optional[str] = None) -> str:
    """
    Injects the module object of ``specifier`` under a generated binding.

    Args:
        specifier: Dotted module path.
        hint: Seed for the binding name (defaults to ``specifier``).

    Returns:
        str: The local binding, e.g. ``"_typing_extensions"``.
    """
    statements.check_specifier(specifier)
    hint = specifier if hint is None else hint

    def build(is_script: bool, source: str, _export: str) -> statements.InjectedStatement:
      return statements.default_import(is_script, source, self._unit.generate_binding(hint))

    return self._unit.cache.store(self._unit.module, self._unit.is_script, specifier, DEFAULT_EXPORT, build)

  def resolve_source(self, node: cst.BaseExpression) -> ResolvedSource:
    """Resolves what ``node`` denotes; see :meth:`SourceResolver.resolve_source`."""
    return self._unit.resolver.resolve_source(node)
