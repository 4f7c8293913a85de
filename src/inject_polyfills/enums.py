"""
Enumerations for inject-polyfills.

This module defines the standard enumerations shared by the detector, the
provider registry and the import injection layer.
"""

from enum import Enum


class Method(str, Enum):
  """
  Polyfilling strategy selected by configuration.

  Each value maps to the provider attribute that implements it
  (see :attr:`Method.attribute`).
  """

  ENTRY_GLOBAL = "entry-global"
  USAGE_GLOBAL = "usage-global"
  USAGE_PURE = "usage-pure"

  @property
  def attribute(self) -> str:
    """
    Name of the provider callback implementing this method.

    Returns:
        str: e.g. ``"usage_global"`` for ``usage-global``.
    """
    return self.value.replace("-", "_")


class Placement(str, Enum):
  """
  Origin classification of a resolved object.
  """

  GLOBAL = "global"  # builtin or otherwise unbound name
  IMPORTED = "imported"  # bound by an import statement
  INSTANCE = "instance"  # literal of a builtin type


class SourceType(str, Enum):
  """
  Module-system mode of a compilation unit.

  ``MODULE`` units receive ``import`` statements, ``SCRIPT`` units receive
  ``__import__`` assignments.
  """

  MODULE = "module"
  SCRIPT = "script"


class Outcome(str, Enum):
  """
  Result signalled by a provider callback for one usage report.
  """

  HANDLED = "handled"  # stop dispatching this report
  NOT_APPLICABLE = "not_applicable"
  DEFERRED = "deferred"  # provider acts later (e.g. in its own matchers)


class InsertionPoint(str, Enum):
  """
  Placement directive carried by an injected statement.

  Both groups land after the module docstring and ``__future__`` imports;
  hoisted statements precede header statements.
  """

  HOISTED = "hoisted"
  HEADER = "header"
