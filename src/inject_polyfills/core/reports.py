"""
Usage Reports.

Normalized descriptions of one syntactic use of a possibly-global API. The
detector builds them, providers consume them. Every report carries a ``kind``
tag so providers can branch on it without ``isinstance`` checks.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from inject_polyfills.enums import Placement


@dataclass(frozen=True)
class ResolvedSource:
  """
  Canonical identity and origin of the object an expression denotes.

  Attributes:
      id: Dotted identity (``"str"``, ``"numpy.linalg"``) or None if unresolved.
      placement: Origin classification or None if unresolved.
  """

  id: Optional[str] = None
  placement: Optional[Placement] = None

  @property
  def resolved(self) -> bool:
    """True when the resolver identified the object."""
    return self.id is not None


UNRESOLVED = ResolvedSource()


@dataclass(frozen=True)
class ImportUsage:
  """A static import or top-level require of ``source``."""

  source: str
  kind: str = field(default="import", init=False)


@dataclass(frozen=True)
class GlobalUsage:
  """A bare reference to the unbound name ``name``."""

  name: str
  kind: str = field(default="global", init=False)


@dataclass(frozen=True)
class PropertyUsage:
  """Access to member ``key`` of ``object`` (None when unresolved)."""

  object: Optional[str]
  key: str
  placement: Optional[Placement]
  kind: str = field(default="property", init=False)


@dataclass(frozen=True)
class MembershipUsage:
  """A membership test of ``key`` against ``object``."""

  object: Optional[str]
  key: str
  placement: Optional[Placement]
  kind: str = field(default="in", init=False)


UsageReport = Union[ImportUsage, GlobalUsage, PropertyUsage, MembershipUsage]
