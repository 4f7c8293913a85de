"""
Tests for Injected Statement Builders.

Verifies the module and script forms of the three import flavors and their
insertion points.
"""

import libcst as cst
import pytest

from inject_polyfills.core.statements import (
  check_specifier,
  create_dotted_name,
  default_import,
  named_import,
  side_effect_import,
)
from inject_polyfills.enums import InsertionPoint


def render(statement) -> str:
  return cst.Module(body=[statement.node]).code


def test_side_effect_forms():
  module_stmt = side_effect_import(False, "polyfills.anext")
  script_stmt = side_effect_import(True, "polyfills.anext")

  assert render(module_stmt) == "import polyfills.anext\n"
  assert module_stmt.insertion == InsertionPoint.HEADER
  assert module_stmt.binding == ""

  assert render(script_stmt) == '__import__("polyfills.anext")\n'
  assert script_stmt.insertion == InsertionPoint.HOISTED


def test_named_forms():
  module_stmt = named_import(False, "asyncstdlib", "anext", "_anext")
  script_stmt = named_import(True, "asyncstdlib", "anext", "_anext")

  assert render(module_stmt) == "from asyncstdlib import anext as _anext\n"
  assert render(script_stmt) == '_anext = __import__("asyncstdlib", fromlist=["anext"]).anext\n'
  assert module_stmt.binding == script_stmt.binding == "_anext"
  assert script_stmt.insertion == InsertionPoint.HOISTED


def test_default_forms():
  module_stmt = default_import(False, "backports.zoneinfo", "_zoneinfo")
  script_stmt = default_import(True, "backports.zoneinfo", "_zoneinfo")

  assert render(module_stmt) == "import backports.zoneinfo as _zoneinfo\n"
  assert render(script_stmt) == '_zoneinfo = __import__("backports.zoneinfo", fromlist=["__name__"])\n'


def test_create_dotted_name():
  node = create_dotted_name("importlib.metadata")
  assert isinstance(node, cst.Attribute)
  assert node.attr.value == "metadata"
  assert isinstance(create_dotted_name("os"), cst.Name)


@pytest.mark.parametrize("specifier", ["", ".relative", "pkg..mod", "pkg-mod", "1pkg"])
def test_invalid_specifiers(specifier):
  with pytest.raises(ValueError):
    check_specifier(specifier)


def test_valid_specifier_is_returned():
  assert check_specifier("polyfills.typing.Self") == "polyfills.typing.Self"
