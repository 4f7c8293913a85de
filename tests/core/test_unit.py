"""
Tests for Compilation Unit State.

Verifies:
1. Generated bindings avoid every name spelled in the module.
2. Injected statements land after the docstring and __future__ imports.
3. Hoisted statements precede header statements.
"""

import libcst as cst

from inject_polyfills.core import statements
from inject_polyfills.core.unit import CompilationUnit, is_docstring, is_future_import
from inject_polyfills.enums import SourceType


def test_generate_binding_avoids_collisions():
  unit = CompilationUnit(cst.parse_module("_anext = 1\n_anext2 = 2\n"))

  assert unit.generate_binding("anext") == "_anext3"
  assert unit.generate_binding("anext") == "_anext4"
  assert unit.generate_binding("functools.cache") == "_functools_cache"


def test_generate_binding_sanitizes_hint():
  unit = CompilationUnit(cst.parse_module(""))

  assert unit.generate_binding("__weird-name42") == "_weird_name"
  assert unit.generate_binding("123") == "_ref"


def test_contains():
  unit = CompilationUnit(cst.parse_module("x = anext(it)\n"))
  call = unit.module.body[0].body[0].value

  assert unit.contains(unit.module)
  assert unit.contains(call)
  assert not unit.contains(cst.parse_module("x = 1\n"))


def test_source_type():
  assert not CompilationUnit(cst.parse_module("")).is_script
  assert CompilationUnit(cst.parse_module(""), SourceType.SCRIPT).is_script
  assert CompilationUnit(cst.parse_module(""), "script").is_script


def test_is_docstring_and_future_import():
  module = cst.parse_module('"""Doc."""\nfrom __future__ import annotations\nimport os\n')

  assert is_docstring(module.body[0], 0)
  assert not is_docstring(module.body[0], 1)
  assert is_future_import(module.body[1])
  assert not is_future_import(module.body[2])


def test_inject_after_docstring_and_future():
  code = '"""Doc."""\nfrom __future__ import annotations\n\nimport os\n'
  unit = CompilationUnit(cst.parse_module(code))
  unit.cache.store(
    unit.module,
    False,
    "polyfills.anext",
    "",
    lambda is_script, spec, _: statements.side_effect_import(is_script, spec),
  )

  result = unit.inject_statements(unit.module).code

  assert result == '"""Doc."""\nfrom __future__ import annotations\nimport polyfills.anext\n\nimport os\n'


def test_hoisted_statements_come_first():
  unit = CompilationUnit(cst.parse_module("x = 1\n"))

  def header(is_script, spec, export):
    return statements.named_import(False, spec, export, f"_{export}")

  def hoisted(is_script, spec, export):
    return statements.named_import(True, spec, export, f"_{export}")

  unit.cache.store(unit.module, False, "asyncstdlib", "aiter", header)
  unit.cache.store(unit.module, False, "asyncstdlib", "anext", hoisted)

  lines = unit.inject_statements(unit.module).code.splitlines()

  assert lines == [
    '_anext = __import__("asyncstdlib", fromlist=["anext"]).anext',
    "from asyncstdlib import aiter as _aiter",
    "x = 1",
  ]


def test_nothing_to_inject_returns_module():
  unit = CompilationUnit(cst.parse_module("x = 1\n"))
  assert unit.inject_statements(unit.module) is unit.module
