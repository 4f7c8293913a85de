"""
Injected Statement Builders.

Builds the module-level statements that load a polyfill. ``import`` forms are
used for module units, ``__import__`` assignments for script units; the
latter are hoisted above every other injected statement.
"""

import re
from dataclasses import dataclass
from typing import Union

import libcst as cst

from inject_polyfills.enums import InsertionPoint

_SPECIFIER = re.compile(r"^[A-Za-z_]\w*(\.[A-Za-z_]\w*)*$")


@dataclass(frozen=True)
class InjectedStatement:
  """
  A synthesized statement with its placement directive.

  Attributes:
      node: The module-level statement.
      binding: Local name bound by the statement ("" for side effects only).
      insertion: Where the statement goes in the module.
  """

  node: cst.SimpleStatementLine
  binding: str
  insertion: InsertionPoint


def create_dotted_name(name_str: str) -> Union[cst.Name, cst.Attribute]:
  """
  Creates a CST node structure for a dotted path string.

  Args:
      name_str (str): Dot-separated path (e.g. "importlib.metadata").

  Returns:
      Union[cst.Name, cst.Attribute]: The constructed node.
  """
  parts = name_str.split(".")
  node = cst.Name(parts[0])
  for part in parts[1:]:
    node = cst.Attribute(value=node, attr=cst.Name(part))
  return node


def check_specifier(specifier: str) -> str:
  """
  Validates an absolute dotted module specifier.

  Raises:
      ValueError: If ``specifier`` is not a dotted identifier path.
  """
  if not _SPECIFIER.match(specifier):
    raise ValueError(f"Invalid module specifier: {specifier!r}")
  return specifier


def _dynamic_import(specifier: str, fromlist: str = "") -> cst.Call:
  args = [cst.Arg(value=cst.SimpleString(f'"{specifier}"'))]
  if fromlist:
    args.append(
      cst.Arg(
        keyword=cst.Name("fromlist"),
        value=cst.List(elements=[cst.Element(value=cst.SimpleString(f'"{fromlist}"'))]),
        equal=cst.AssignEqual(
          whitespace_before=cst.SimpleWhitespace(""),
          whitespace_after=cst.SimpleWhitespace(""),
        ),
      )
    )
  return cst.Call(func=cst.Name("__import__"), args=args)


def _assign(binding: str, value: cst.BaseExpression) -> cst.SimpleStatementLine:
  return cst.SimpleStatementLine(body=[cst.Assign(targets=[cst.AssignTarget(target=cst.Name(binding))], value=value)])


def side_effect_import(is_script: bool, specifier: str) -> InjectedStatement:
  """``import pkg.mod`` / ``__import__("pkg.mod")``."""
  if is_script:
    node = cst.SimpleStatementLine(body=[cst.Expr(value=_dynamic_import(specifier))])
    return InjectedStatement(node, "", InsertionPoint.HOISTED)

  node = cst.SimpleStatementLine(body=[cst.Import(names=[cst.ImportAlias(name=create_dotted_name(specifier))])])
  return InjectedStatement(node, "", InsertionPoint.HEADER)


def named_import(is_script: bool, specifier: str, name: str, binding: str) -> InjectedStatement:
  """``from pkg.mod import name as binding`` / ``binding = __import__(...).name``."""
  if is_script:
    value = cst.Attribute(value=_dynamic_import(specifier, fromlist=name), attr=cst.Name(name))
    return InjectedStatement(_assign(binding, value), binding, InsertionPoint.HOISTED)

  alias = cst.ImportAlias(name=cst.Name(name), asname=cst.AsName(name=cst.Name(binding)))
  node = cst.SimpleStatementLine(body=[cst.ImportFrom(module=create_dotted_name(specifier), names=[alias])])
  return InjectedStatement(node, binding, InsertionPoint.HEADER)


def default_import(is_script: bool, specifier: str, binding: str) -> InjectedStatement:
  """``import pkg.mod as binding`` / ``binding = __import__(..., fromlist=["__name__"])``."""
  if is_script:
    # a non-empty fromlist makes __import__ return the leaf module
    value = _dynamic_import(specifier, fromlist="__name__")
    return InjectedStatement(_assign(binding, value), binding, InsertionPoint.HOISTED)

  alias = cst.ImportAlias(name=create_dotted_name(specifier), asname=cst.AsName(name=cst.Name(binding)))
  node = cst.SimpleStatementLine(body=[cst.Import(names=[alias])])
  return InjectedStatement(node, binding, InsertionPoint.HEADER)
