"""
Tests for Source Resolution.

Verifies identity resolution for unbound names, imports, literals and
namespace accessors, and the extraction of static import sources.
"""

import libcst as cst
import pytest
from libcst.metadata import QualifiedName, QualifiedNameSource

from inject_polyfills.core.reports import UNRESOLVED, ResolvedSource
from inject_polyfills.core.resolver import SourceResolver, get_full_name
from inject_polyfills.core.unit import CompilationUnit
from inject_polyfills.enums import Placement


def last_value(code: str):
  """Returns the unit and the value of the module's final assignment."""
  unit = CompilationUnit(cst.parse_module(code))
  return unit, unit.module.body[-1].body[0].value


@pytest.mark.parametrize(
  "code, expected",
  [
    ("x = str", ResolvedSource("str", Placement.GLOBAL)),
    ("x = ExceptionGroup", ResolvedSource("ExceptionGroup", Placement.GLOBAL)),
    ("import numpy as np\nx = np.linalg", ResolvedSource("numpy.linalg", Placement.IMPORTED)),
    ("from os import path\nx = path", ResolvedSource("os.path", Placement.IMPORTED)),
    ("x = str.maketrans", ResolvedSource("str.maketrans", Placement.GLOBAL)),
    ("import os\nx = vars(os)", ResolvedSource("os", Placement.IMPORTED)),
    ("x = str.__dict__", ResolvedSource("str", Placement.GLOBAL)),
    ("x = 'abc'", ResolvedSource("str", Placement.INSTANCE)),
    ("x = b'abc'", ResolvedSource("bytes", Placement.INSTANCE)),
    ("x = f'{y}'", ResolvedSource("str", Placement.INSTANCE)),
    ("x = 1", ResolvedSource("int", Placement.INSTANCE)),
    ("x = 1.5", ResolvedSource("float", Placement.INSTANCE)),
    ("x = [1]", ResolvedSource("list", Placement.INSTANCE)),
    ("x = {1: 2}", ResolvedSource("dict", Placement.INSTANCE)),
    ("x = (1, 2)", ResolvedSource("tuple", Placement.INSTANCE)),
    ("x = lambda: 1", ResolvedSource("function", Placement.INSTANCE)),
  ],
)
def test_resolve_source(code, expected):
  unit, value = last_value(code)
  assert unit.resolver.resolve_source(value) == expected


@pytest.mark.parametrize(
  "code",
  [
    "y = 1\nx = y",
    "y = 1\nx = y.attr",
    "x = call()",
    "x = 'a' f'{b}'",
  ],
)
def test_unresolved(code):
  unit, value = last_value(code)
  assert unit.resolver.resolve_source(value) == UNRESOLVED


def test_shadowed_builtin_is_bound():
  unit, value = last_value("str = 'x'\ny = str")
  assert not unit.resolver.is_unbound(value)


def test_attribute_name_is_never_unbound():
  unit, value = last_value("x = a.anext")
  assert unit.resolver.is_unbound(value.value)
  assert not unit.resolver.is_unbound(value.attr)


def test_qualified_name_requires_name_or_attribute():
  unit, value = last_value("from operator import attrgetter\nx = attrgetter('a')(obj)")
  assert unit.resolver.qualified_name(value.func.func) == "operator.attrgetter"
  assert unit.resolver.qualified_name(value.func) is None


def test_qualified_names_may_be_computed_lazily():
  """
  Scenario: metadata values are callables producing the qualified names, as
  ``MetadataWrapper.resolve_many`` hands out for QualifiedNameProvider.
  Expect: the callable is evaluated and the import-derived name returned.
  """
  node = cst.Attribute(value=cst.Name("np"), attr=cst.Name("linalg"))
  names = {
    QualifiedName(name="numpy.linalg", source=QualifiedNameSource.IMPORT),
    QualifiedName(name="np.linalg", source=QualifiedNameSource.LOCAL),
  }
  resolver = SourceResolver({}, {node: lambda: names}, {})

  assert resolver.qualified_name(node) == "numpy.linalg"
  assert resolver.resolve_source(node) == ResolvedSource("numpy.linalg", Placement.IMPORTED)


def test_module_metadata_resolves_imports():
  unit, value = last_value("import typing\nx = typing.Self")
  assert unit.resolver.qualified_name(value) == "typing.Self"
  assert unit.resolver.qualified_name(value.value) == "typing"


def test_resolve_key():
  unit, value = last_value("x = getattr(obj, 'key')")
  resolver = unit.resolver

  assert resolver.resolve_key(value.args[1].value, computed=True) == "key"
  assert resolver.resolve_key(value.args[0].value, computed=True) is None
  assert resolver.resolve_key(value.args[0].value) == "obj"


def test_import_sources():
  module = cst.parse_module(
    "import polyfills.stable\n"
    "import a, b\n"
    "import c as d\n"
    "__import__('polyfills')\n"
    "import importlib\n"
    "importlib.import_module('polyfills.anext')\n"
    "__import__(name)\n"
  )
  unit = CompilationUnit(module)
  smalls = [stmt.body[0] for stmt in unit.module.body]
  resolver = unit.resolver

  assert resolver.get_import_source(smalls[0]) == "polyfills.stable"
  assert resolver.get_import_source(smalls[1]) is None
  assert resolver.get_import_source(smalls[2]) is None
  assert resolver.get_require_source(smalls[3]) == "polyfills"
  assert resolver.get_require_source(smalls[5]) == "polyfills.anext"
  assert resolver.get_require_source(smalls[6]) is None
  assert resolver.get_require_source(smalls[0]) is None


def test_get_full_name():
  assert get_full_name(cst.parse_expression("a.b.c")) == "a.b.c"
  assert get_full_name(cst.parse_expression("a().b")) == ""
