"""
Provider Registry.

Turns the ``providers`` configuration into live provider instances:

1.  **Resolution**: provider entries may be factories, registered names
    (see :func:`register_provider`) or ``"package.module:attr"`` import paths,
    optionally paired with an options mapping.
2.  **Capabilities**: every provider receives a frozen :class:`ProviderApi`
    exposing the targets, its include/exclude sets and filtering helpers.
3.  **Validation**: the instance must implement the configured method.

The resulting list is built once per plugin and is read-only afterwards; its
order is the dispatch order.
"""

import importlib
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

import libcst as cst
import libcst.matchers as m
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from inject_polyfills.core.targets import TargetSet, filter_items, is_required
from inject_polyfills.enums import Method
from inject_polyfills.errors import ConfigurationError

logger = logging.getLogger(__name__)

UsageCallback = Callable[[Any, Any, cst.CSTNode], Any]
MatcherCallback = Callable[[cst.CSTNode, Any], Any]
ProviderMatcher = Tuple[m.BaseMatcherNode, MatcherCallback]
ProviderFactory = Callable[["ProviderApi", Dict[str, Any]], Any]

# Global Registry
_PROVIDERS: Dict[str, ProviderFactory] = {}
_PROVIDERS_LOADED = False


class PolyfillProvider:
  """
  Optional base class for providers.

  A provider implements the callback of every method it supports; the others
  stay None. Callbacks receive ``(report, utils, anchor)`` and return None, an
  :class:`~inject_polyfills.enums.Outcome`, or a replacement for the anchor.

  Attributes:
      name: Display name used in configuration errors.
      matchers: Extra ``(matcher, callback)`` pairs merged into the traversal.
  """

  name: str = ""
  matchers: Sequence[ProviderMatcher] = ()

  entry_global: Optional[UsageCallback] = None
  usage_global: Optional[UsageCallback] = None
  usage_pure: Optional[UsageCallback] = None


class ProviderOptions(BaseModel):
  """
  Options common to every provider. Unknown keys are passed through.
  """

  model_config = ConfigDict(extra="allow")

  include: List[str] = Field(default_factory=list, description="Polyfills always injected.")
  exclude: List[str] = Field(default_factory=list, description="Polyfills never injected.")


@dataclass(frozen=True)
class ProviderDescriptor:
  """
  A resolved ``providers`` entry.

  Attributes:
      factory: Called as ``factory(api, options)`` to build the provider.
      options: Read-only provider options.
      alias: Name used in error messages.
  """

  factory: ProviderFactory
  options: Mapping[str, Any]
  alias: str


@dataclass(frozen=True)
class ProviderApi:
  """
  Capabilities handed to a provider factory.

  Attributes:
      method: The configured polyfilling method.
      targets: The resolved target set.
      include: Names the user forces in.
      exclude: Names the user forces out.
      get_utils: Returns the injection utils for an anchor node.
  """

  method: Method
  targets: TargetSet
  include: FrozenSet[str]
  exclude: FrozenSet[str]
  get_utils: Callable[[cst.CSTNode], Any]

  def filter_polyfills(
    self,
    polyfills: Mapping[str, Any],
    default_include: Optional[Iterable[str]] = None,
    default_exclude: Optional[Iterable[str]] = None,
  ) -> Set[str]:
    """
    Selects the polyfills still required by the targets.

    Args:
        polyfills: Mapping of polyfill name to support information.
        default_include: Names added unless excluded.
        default_exclude: Names removed unless included.

    Returns:
        Set[str]: The required polyfill names.
    """
    return filter_items(polyfills, self.include, self.exclude, self.targets, default_include, default_exclude)

  def is_polyfill_required(self, support: Any) -> bool:
    """True if some target lacks the feature described by ``support``."""
    return is_required(self.targets, support)


def register_provider(name: str) -> Callable[[ProviderFactory], ProviderFactory]:
  """
  Decorator registering a provider factory under ``name``.

  Args:
      name: The name usable in the ``providers`` configuration.
  """

  def decorator(factory: ProviderFactory) -> ProviderFactory:
    _PROVIDERS[name] = factory
    return factory

  return decorator


def load_providers() -> None:
  """Imports the bundled providers package so its factories register."""
  global _PROVIDERS_LOADED
  if _PROVIDERS_LOADED:
    return
  _PROVIDERS_LOADED = True
  import inject_polyfills.providers  # noqa: F401


def get_provider(name: str) -> Optional[ProviderFactory]:
  """
  Retrieves a registered provider factory by name.
  Lazily loads the bundled providers on first lookup.
  """
  load_providers()
  return _PROVIDERS.get(name)


def resolve_provider(spec: str) -> ProviderFactory:
  """
  Resolves a provider name or ``"package.module:attr"`` path to a factory.

  Raises:
      ConfigurationError: If nothing can be found under ``spec``.
  """
  factory = get_provider(spec)
  if factory is not None:
    return factory

  module_name, _, attr = spec.partition(":")
  if not attr:
    module_name, _, attr = spec.rpartition(".")
  if not module_name or not attr:
    raise ConfigurationError(f'Cannot find the "{spec}" provider.')

  try:
    module = importlib.import_module(module_name)
    factory = getattr(module, attr)
  except (ImportError, AttributeError) as e:
    raise ConfigurationError(f'Cannot find the "{spec}" provider: {e}')

  if not callable(factory):
    raise ConfigurationError(f'The "{spec}" provider is not callable.')
  return factory


def resolve_method(method: Any) -> Method:
  """
  Validates the configured method.

  Raises:
      ConfigurationError: If ``method`` is not one of the three method names.
  """
  if not isinstance(method, str):
    raise ConfigurationError(".method must be a string")
  try:
    return Method(method)
  except ValueError:
    raise ConfigurationError(
      f'.method must be one of "entry-global", "usage-global" or "usage-pure" (received "{method}")'
    )


def _split_entry(entry: Any) -> Tuple[Any, Mapping[str, Any]]:
  if isinstance(entry, (list, tuple)):
    if len(entry) != 2 or not isinstance(entry[1], Mapping):
      raise ConfigurationError(f"Provider entries must be a provider or a [provider, options] pair (received {entry!r})")
    return entry[0], entry[1]
  return entry, {}


def create_provider_descriptors(providers: Any) -> List[ProviderDescriptor]:
  """
  Resolves the ``providers`` configuration.

  Args:
      providers: Non-empty list of factories, names, import paths, or
          ``[provider, options]`` pairs.

  Returns:
      List[ProviderDescriptor]: Descriptors in configuration order.

  Raises:
      ConfigurationError: If the list is empty or an entry is invalid.
  """
  if not isinstance(providers, (list, tuple)) or len(providers) == 0:
    raise ConfigurationError(".providers must be a list with at least one element.")

  descriptors = []
  for entry in providers:
    target, raw_options = _split_entry(entry)

    if isinstance(target, str):
      factory, alias = resolve_provider(target), target
    elif callable(target):
      factory, alias = target, getattr(target, "__name__", repr(target))
    else:
      raise ConfigurationError(f"Invalid provider: {target!r}")

    try:
      options = ProviderOptions.model_validate(dict(raw_options)).model_dump()
    except ValidationError as e:
      raise ConfigurationError(f'Invalid options for the "{alias}" provider: {e}')

    descriptors.append(ProviderDescriptor(factory, MappingProxyType(options), alias))
  return descriptors


def build_providers(
  descriptors: Sequence[ProviderDescriptor],
  method: Method,
  targets: TargetSet,
  get_utils: Callable[[cst.CSTNode], Any],
) -> List[Any]:
  """
  Instantiates every provider and checks it supports ``method``.

  Args:
      descriptors: Resolved provider entries.
      method: The configured method.
      targets: The resolved target set.
      get_utils: Utils lookup exposed through the provider API.

  Returns:
      List: Provider instances in descriptor order.

  Raises:
      ConfigurationError: If a provider lacks the method's callback.
  """
  providers = []
  for descriptor in descriptors:
    api = ProviderApi(
      method=method,
      targets=targets,
      include=frozenset(descriptor.options.get("include", ())),
      exclude=frozenset(descriptor.options.get("exclude", ())),
      get_utils=get_utils,
    )
    provider = descriptor.factory(api, dict(descriptor.options))

    if not callable(getattr(provider, method.attribute, None)):
      name = getattr(provider, "name", None) or descriptor.alias
      raise ConfigurationError(f'The "{name}" provider doesn\'t support the "{method.value}" polyfilling method.')

    logger.debug("Registered provider %s for %s", descriptor.alias, method.value)
    providers.append(provider)
  return providers
