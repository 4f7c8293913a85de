"""
Target Resolution and Filtering.

A target set is the collection of Python versions the transformed code must
run on. It is resolved once per plugin from configuration (an explicit
specifier, the project's ``requires-python``, or every known version) and is
immutable afterwards.

Support information describes the first Python version that ships a feature
natively, e.g. ``"3.9"`` or ``{"python": "3.9"}``; ``None`` means no version
does.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, List, Mapping, Optional, Set, Tuple, Union

from inject_polyfills.config import find_pyproject
from inject_polyfills.errors import ConfigurationError

logger = logging.getLogger(__name__)

Version = Tuple[int, int]

KNOWN_VERSIONS: Tuple[Version, ...] = tuple((3, minor) for minor in range(6, 15))

_CLAUSE = re.compile(r"^(~=|===|==|!=|<=|>=|<|>)?\s*(\d+)(?:\.(\d+|\*))?((?:\.(?:\d+|\*))*)$")

TargetsOption = Union[None, str, Iterable[str], Mapping[str, Any]]


@dataclass(frozen=True)
class TargetSet:
  """
  Immutable, sorted set of targeted ``(major, minor)`` Python versions.
  """

  versions: Tuple[Version, ...]

  @classmethod
  def of(cls, versions: Iterable[Version]) -> "TargetSet":
    """Builds a target set from any iterable of versions."""
    return cls(tuple(sorted(set(versions))))

  @property
  def oldest(self) -> Version:
    """The oldest targeted version."""
    return self.versions[0]

  def __iter__(self) -> Iterator[Version]:
    return iter(self.versions)

  def __contains__(self, version: object) -> bool:
    return version in self.versions

  def __len__(self) -> int:
    return len(self.versions)

  def __str__(self) -> str:
    return ", ".join(f"python {major}.{minor}" for major, minor in self.versions)


def parse_version(text: str) -> Version:
  """
  Parses ``"3.9"`` (or ``"3.9.1"``) into ``(3, 9)``.

  Raises:
      ValueError: If the text is not a version.
  """
  parts = text.strip().split(".")
  try:
    major = int(parts[0])
    minor = int(parts[1]) if len(parts) > 1 else 0
  except ValueError:
    raise ValueError(f"Invalid Python version: {text!r}")
  return (major, minor)


def _clause_predicate(clause: str) -> Callable[[Version], bool]:
  match = _CLAUSE.match(clause.strip())
  if not match:
    raise ConfigurationError(f"Invalid Python version specifier: {clause!r}")

  op, major_s, minor_s, patch_s = match.groups()
  op = op or "=="
  major = int(major_s)
  wildcard = minor_s in (None, "*")
  version = (major, 0 if wildcard else int(minor_s))

  if op in ("==", "==="):
    if wildcard:
      return lambda v: v[0] == major
    return lambda v: v == version
  if op == "!=":
    if wildcard:
      return lambda v: v[0] != major
    return lambda v: v != version
  if op == ">=":
    return lambda v: v >= version
  if op == ">":
    return lambda v: v > version
  if op == "<=":
    return lambda v: v <= version
  if op == "<":
    return lambda v: v < version
  if wildcard or "*" in patch_s:
    raise ConfigurationError(f"~= needs a release with at least two components: {clause!r}")
  # ~=X.Y.Z pins the X.Y release, ~=X.Y the X major release
  if patch_s:
    return lambda v: v == version
  return lambda v: v >= version and v[0] == major


def match_versions(specifier: str) -> List[Version]:
  """
  Returns the known versions matching a comma-separated specifier.

  Args:
      specifier: e.g. ``">=3.8,<3.12"``; a bare ``"3.9"`` means ``"==3.9"``.

  Returns:
      List[Version]: Matching versions in ascending order.
  """
  predicates = [_clause_predicate(clause) for clause in specifier.split(",") if clause.strip()]
  if not predicates:
    raise ConfigurationError(f"Empty Python version specifier: {specifier!r}")
  return [v for v in KNOWN_VERSIONS if all(pred(v) for pred in predicates)]


def _requires_python(config_path: Optional[Path]) -> Optional[str]:
  data, location = find_pyproject(config_path or Path.cwd())
  requires = data.get("project", {}).get("requires-python")
  if requires:
    logger.debug("Using requires-python %r from %s", requires, location)
  return requires


def resolve_targets(
  targets: TargetsOption = None,
  ignore_project_config: bool = False,
  config_path: Optional[Path] = None,
) -> TargetSet:
  """
  Resolves the configured targets into a :class:`TargetSet`.

  Args:
      targets: A specifier string, a list of specifiers (their union), or a
          mapping with a ``"python"`` key. None defers to the project config.
      ignore_project_config: If True, never read ``requires-python``.
      config_path: A ``pyproject.toml`` or a directory to search upwards from.

  Returns:
      TargetSet: The targeted versions. Every known version when nothing is
      configured.

  Raises:
      ConfigurationError: If a specifier is invalid or matches nothing.
  """
  query = targets.get("python") if isinstance(targets, Mapping) else targets

  if query is None and not ignore_project_config:
    query = _requires_python(config_path)

  if query is None:
    return TargetSet(KNOWN_VERSIONS)

  queries = [query] if isinstance(query, str) else list(query) if isinstance(query, (list, tuple, set)) else []
  if not queries or not all(isinstance(q, str) for q in queries):
    raise ConfigurationError(f".targets must be a version specifier or a list of them (received {targets!r})")

  versions: Set[Version] = set()
  for q in queries:
    versions.update(match_versions(q))

  if not versions:
    raise ConfigurationError(f"Targets {query!r} match no known Python version.")
  return TargetSet.of(versions)


def _support_version(support: Any) -> Optional[Version]:
  if isinstance(support, Mapping):
    support = support.get("python")
  if support is None:
    return None
  if isinstance(support, tuple):
    return (support[0], support[1] if len(support) > 1 else 0)
  return parse_version(str(support))


def is_required(targets: TargetSet, support: Any) -> bool:
  """
  Checks whether some target lacks a feature.

  Args:
      targets: The target set.
      support: First version shipping the feature natively, or None.

  Returns:
      bool: True if any target version is older than ``support``.
  """
  native = _support_version(support)
  if native is None:
    return True
  return any(version < native for version in targets)


def filter_items(
  items: Mapping[str, Any],
  include: Iterable[str],
  exclude: Iterable[str],
  targets: TargetSet,
  default_include: Optional[Iterable[str]] = None,
  default_exclude: Optional[Iterable[str]] = None,
) -> Set[str]:
  """
  Selects the items still required by the targets.

  Exclusion wins over inclusion; included items are kept regardless of the
  targets. Default includes are added unless excluded, default excludes are
  dropped unless included.

  Args:
      items: Mapping of item name to support information.
      include: Names forced in.
      exclude: Names forced out.
      targets: The target set.
      default_include: Names added on top of the target-derived selection.
      default_exclude: Names removed from the target-derived selection.

  Returns:
      Set[str]: The selected names.
  """
  include = set(include)
  exclude = set(exclude)
  result: Set[str] = set()

  for name, support in items.items():
    if name in exclude:
      continue
    if name in include or is_required(targets, support):
      result.add(name)

  for name in default_include or ():
    if name not in exclude:
      result.add(name)

  for name in default_exclude or ():
    if name not in include:
      result.discard(name)

  return result
