"""
Tests for Target Resolution.

Verifies:
1. Specifier matching against the known Python versions.
2. Fallback to ``requires-python`` and to every known version.
3. Configuration errors for invalid or empty specifiers.
4. Required-polyfill decisions and include/exclude filtering.
"""

import logging

import pytest

from inject_polyfills.core.targets import (
  KNOWN_VERSIONS,
  TargetSet,
  filter_items,
  is_required,
  match_versions,
  parse_version,
  resolve_targets,
)
from inject_polyfills.errors import ConfigurationError


def test_parse_version():
  assert parse_version("3.9") == (3, 9)
  assert parse_version("3.10.2") == (3, 10)
  assert parse_version("3") == (3, 0)
  with pytest.raises(ValueError):
    parse_version("three")


@pytest.mark.parametrize(
  "specifier, expected",
  [
    (">=3.8,<3.10", [(3, 8), (3, 9)]),
    ("3.9", [(3, 9)]),
    ("==3.12", [(3, 12)]),
    ("~=3.12", [(3, 12), (3, 13), (3, 14)]),
    (">3.13", [(3, 14)]),
    ("<=3.7", [(3, 6), (3, 7)]),
    (">=3.12, !=3.13", [(3, 12), (3, 14)]),
  ],
)
def test_match_versions(specifier, expected):
  assert match_versions(specifier) == expected


def test_wildcard_matches_major():
  assert match_versions("3.*") == list(KNOWN_VERSIONS)
  assert match_versions("!=3.*") == []


def test_compatible_release():
  """
  Scenario: ``~=`` with two and three release components.
  Expect: ~=X.Y stays within major X, ~=X.Y.Z within release X.Y.
  """
  assert match_versions("~=3.9") == [v for v in KNOWN_VERSIONS if v >= (3, 9)]
  assert match_versions("~=3.9.1") == [(3, 9)]
  assert match_versions("~=3.9.1.2") == [(3, 9)]
  assert match_versions(">=3.8, ~=3.10.0") == [(3, 10)]


@pytest.mark.parametrize("specifier", ["~=3", "~=3.*", "~=3.9.*"])
def test_compatible_release_needs_two_components(specifier):
  with pytest.raises(ConfigurationError, match="at least two components"):
    match_versions(specifier)


def test_invalid_specifier_is_configuration_error():
  with pytest.raises(ConfigurationError, match="Invalid Python version specifier"):
    match_versions("python3")
  with pytest.raises(ConfigurationError):
    match_versions(" , ")


def test_resolve_explicit_targets():
  targets = resolve_targets(">=3.12")
  assert list(targets) == [(3, 12), (3, 13), (3, 14)]
  assert targets.oldest == (3, 12)
  assert (3, 11) not in targets


def test_resolve_list_is_union():
  targets = resolve_targets([">=3.13", "3.8"])
  assert list(targets) == [(3, 8), (3, 13), (3, 14)]


def test_resolve_mapping():
  assert list(resolve_targets({"python": "3.10"})) == [(3, 10)]


def test_resolve_without_config_uses_all_versions():
  targets = resolve_targets(None, ignore_project_config=True)
  assert list(targets) == list(KNOWN_VERSIONS)


def test_resolve_reads_requires_python(tmp_path):
  """
  Scenario: no explicit targets, project declares requires-python.
  Expect: the project's range is used, whether given the directory or the file.
  """
  pyproject = tmp_path / "pyproject.toml"
  pyproject.write_text('[project]\nname = "demo"\nrequires-python = ">=3.11"\n', encoding="utf-8")

  assert resolve_targets(None, config_path=tmp_path).oldest == (3, 11)
  assert resolve_targets(None, config_path=pyproject).oldest == (3, 11)

  # explicit targets and ignore_project_config both bypass the file
  assert resolve_targets("3.8", config_path=tmp_path).oldest == (3, 8)
  assert resolve_targets(None, ignore_project_config=True, config_path=tmp_path).oldest == KNOWN_VERSIONS[0]


def test_unreadable_pyproject_is_ignored(tmp_path, caplog):
  (tmp_path / "pyproject.toml").write_text("[project\n", encoding="utf-8")

  with caplog.at_level(logging.WARNING):
    targets = resolve_targets(None, config_path=tmp_path)

  assert list(targets) == list(KNOWN_VERSIONS)
  assert "Ignoring unreadable" in caplog.text


@pytest.mark.parametrize("targets", [">=4.0", 5, [], [3.9]])
def test_resolve_invalid_targets(targets):
  with pytest.raises(ConfigurationError):
    resolve_targets(targets)


def test_target_set_str():
  assert str(TargetSet.of([(3, 9), (3, 8), (3, 9)])) == "python 3.8, python 3.9"


def test_is_required():
  targets = TargetSet.of([(3, 9), (3, 10)])

  assert is_required(targets, "3.10")
  assert not is_required(targets, "3.9")
  assert not is_required(targets, {"python": "3.8"})
  assert is_required(targets, (3, 11))
  # no version ships it natively
  assert is_required(targets, None)


def test_filter_items():
  """
  Scenario: three items, one already native on every target.
  Expect: excludes beat includes, includes beat the targets.
  """
  targets = TargetSet.of([(3, 10)])
  items = {"old": "3.8", "new": "3.11", "newer": "3.12"}

  assert filter_items(items, [], [], targets) == {"new", "newer"}
  assert filter_items(items, ["old"], ["newer"], targets) == {"old", "new"}
  assert filter_items(items, ["new"], ["new"], targets) == {"newer"}


def test_filter_items_defaults():
  targets = TargetSet.of([(3, 10)])
  items = {"old": "3.8", "new": "3.11"}

  result = filter_items(items, [], ["extra"], targets, default_include=["extra", "always"], default_exclude=["new"])
  assert result == {"always"}

  result = filter_items(items, ["new"], [], targets, default_exclude=["new"])
  assert result == {"new"}
