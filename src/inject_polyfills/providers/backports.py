"""
Provider for Standard-Library Backports.

Maps standard-library features to the Python release that introduced them and
to the PyPI backport that provides them on older interpreters.

- **usage-pure**: rewrites each usage site to a private import from the
  backport (``typing.Self`` becomes ``_Self`` with
  ``from typing_extensions import Self as _Self``). ``str.removeprefix`` and
  ``str.removesuffix`` calls, which no package backports, are rewritten to
  helper functions from ``<prefix>.str``.
- **usage-global**: injects ``import <prefix>.<feature>`` for each used
  feature, leaving the usage site untouched.
- **entry-global**: replaces ``import <prefix>`` with the side-effect import of
  every feature the targets still need.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Set

import libcst as cst
import libcst.matchers as m

from inject_polyfills.core.registry import PolyfillProvider, ProviderApi, register_provider
from inject_polyfills.core.reports import GlobalUsage, ImportUsage, MembershipUsage, PropertyUsage
from inject_polyfills.enums import Method, Outcome, Placement


@dataclass(frozen=True)
class Backport:
  """
  A backported feature.

  Attributes:
      python: First Python version shipping the feature.
      module: The backport module.
      export: The attribute of ``module`` providing the feature.
  """

  python: str
  module: str
  export: str


BACKPORTS: Dict[str, Backport] = {
  "ExceptionGroup": Backport("3.11", "exceptiongroup", "ExceptionGroup"),
  "BaseExceptionGroup": Backport("3.11", "exceptiongroup", "BaseExceptionGroup"),
  "aiter": Backport("3.10", "asyncstdlib", "aiter"),
  "anext": Backport("3.10", "asyncstdlib", "anext"),
  "functools.cached_property": Backport("3.8", "backports.cached_property", "cached_property"),
  "importlib.metadata.version": Backport("3.8", "importlib_metadata", "version"),
  "importlib.metadata.distribution": Backport("3.8", "importlib_metadata", "distribution"),
  "importlib.resources.files": Backport("3.9", "importlib_resources", "files"),
  "tomllib.load": Backport("3.11", "tomli", "load"),
  "tomllib.loads": Backport("3.11", "tomli", "loads"),
  "tomllib.TOMLDecodeError": Backport("3.11", "tomli", "TOMLDecodeError"),
  "typing.Annotated": Backport("3.9", "typing_extensions", "Annotated"),
  "typing.Final": Backport("3.8", "typing_extensions", "Final"),
  "typing.Literal": Backport("3.8", "typing_extensions", "Literal"),
  "typing.LiteralString": Backport("3.11", "typing_extensions", "LiteralString"),
  "typing.Never": Backport("3.11", "typing_extensions", "Never"),
  "typing.ParamSpec": Backport("3.10", "typing_extensions", "ParamSpec"),
  "typing.Protocol": Backport("3.8", "typing_extensions", "Protocol"),
  "typing.Self": Backport("3.11", "typing_extensions", "Self"),
  "typing.TypeAlias": Backport("3.10", "typing_extensions", "TypeAlias"),
  "typing.TypeGuard": Backport("3.10", "typing_extensions", "TypeGuard"),
  "typing.TypedDict": Backport("3.8", "typing_extensions", "TypedDict"),
  "typing.assert_never": Backport("3.11", "typing_extensions", "assert_never"),
  "typing.override": Backport("3.12", "typing_extensions", "override"),
  "zoneinfo.ZoneInfo": Backport("3.9", "backports.zoneinfo", "ZoneInfo"),
}

# Methods of builtin types; polyfilled by helpers from ``<prefix>.str``.
STRING_METHODS: Dict[str, str] = {
  "str.removeprefix": "3.9",
  "str.removesuffix": "3.9",
}

# Builtin types sharing the string method names.
_STRING_TYPES = frozenset({"str", "bytes", "bytearray"})


def feature_name(report: Any) -> Optional[str]:
  """
  Returns the table key a usage report refers to.

  Args:
      report: Any usage report.

  Returns:
      Optional[str]: ``"anext"`` for a bare ``anext``, ``"typing.Self"`` for
      ``typing.Self``; None for reports with an unresolved object.
  """
  if isinstance(report, GlobalUsage):
    return report.name
  if isinstance(report, (PropertyUsage, MembershipUsage)) and report.object:
    if report.object == "builtins":
      return report.key
    return f"{report.object}.{report.key}"
  return None


def _may_be_str(receiver: cst.BaseExpression, utils: Any) -> bool:
  """
  Checks whether a method call receiver can be a ``str`` instance.

  Literals of other types, ``bytes(...)``/``bytearray(...)`` calls and the
  builtin type objects themselves (``str.removeprefix(s, "a")``) cannot.
  Anything unresolved may be.
  """
  if isinstance(receiver, cst.Call):
    callee = utils.resolve_source(receiver.func)
    return not (callee.placement == Placement.GLOBAL and callee.id in _STRING_TYPES - {"str"})
  source = utils.resolve_source(receiver)
  if source.placement == Placement.INSTANCE:
    return source.id == "str"
  return not (source.placement == Placement.GLOBAL and source.id in _STRING_TYPES)


class BackportsProvider(PolyfillProvider):
  """
  Provider injecting standard-library backports.

  Attributes:
      prefix: Package holding the side-effect polyfill modules.
      entry: The module whose import ``entry-global`` expands.
      required: Features the targets still need (after include/exclude).
  """

  name = "python-backports"

  def __init__(self, api: ProviderApi, prefix: str = "polyfills", entry: Optional[str] = None):
    self.api = api
    self.prefix = prefix
    self.entry = entry or prefix

    support = {name: backport.python for name, backport in BACKPORTS.items()}
    support.update(STRING_METHODS)
    self.required: Set[str] = api.filter_polyfills(support)

    if api.method == Method.USAGE_PURE:
      string_methods = m.OneOf(*(m.Name(key.split(".")[1]) for key in STRING_METHODS))
      self.matchers = ((m.Call(func=m.Attribute(attr=string_methods)), self._rewrite_string_method),)

  def entry_global(self, report: Any, utils: Any, anchor: cst.CSTNode) -> Any:
    """Expands ``import <entry>`` into the required polyfill imports."""
    if not isinstance(report, ImportUsage) or report.source != self.entry:
      return None
    for name in sorted(self.required):
      utils.inject_global_import(f"{self.prefix}.{name}")
    return cst.RemovalSentinel.REMOVE

  def usage_global(self, report: Any, utils: Any, anchor: cst.CSTNode) -> Any:
    """Injects the side-effect polyfill of a used feature."""
    name = feature_name(report)
    if name in self.required:
      utils.inject_global_import(f"{self.prefix}.{name}")
    return None

  def usage_pure(self, report: Any, utils: Any, anchor: cst.CSTNode) -> Any:
    """Rewrites a usage site to a private import from the backport."""
    name = feature_name(report)
    if name not in self.required or name not in BACKPORTS:
      return None
    if isinstance(report, MembershipUsage):
      return None
    # the anchor must be an expression standing for the feature itself
    if not isinstance(anchor, (cst.Name, cst.Attribute, cst.Call)):
      return Outcome.NOT_APPLICABLE

    backport = BACKPORTS[name]
    binding = utils.inject_named_import(backport.module, backport.export)
    return cst.Name(binding)

  def _rewrite_string_method(self, node: cst.Call, utils: Any) -> Any:
    method = f"str.{node.func.attr.value}"
    if method not in self.required or not _may_be_str(node.func.value, utils):
      return None

    helper = utils.inject_named_import(f"{self.prefix}.str", node.func.attr.value)

    def rewrite(updated: cst.Call) -> cst.Call:
      receiver = cst.Arg(value=updated.func.value, comma=cst.Comma(whitespace_after=cst.SimpleWhitespace(" ")))
      args = [receiver, *updated.args] if updated.args else [receiver.with_changes(comma=cst.MaybeSentinel.DEFAULT)]
      return cst.Call(func=cst.Name(helper), args=args)

    return rewrite


@register_provider("python-backports")
def create_backports_provider(api: ProviderApi, options: Dict[str, Any]) -> BackportsProvider:
  """
  Factory for the ``python-backports`` provider.

  Options:
      prefix: Package of the side-effect polyfill modules (default ``"polyfills"``).
      entry: Module expanded by ``entry-global`` (default: the prefix).
  """
  return BackportsProvider(api, prefix=options.get("prefix", "polyfills"), entry=options.get("entry"))
