"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- A recording provider that captures every report it is dispatched.
- Global registry isolation so tests registering providers do not leak.
"""

import sys
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

import pytest

# Add src to path so we can import 'inject_polyfills' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from inject_polyfills.core import registry  # noqa: E402
from inject_polyfills.core.registry import PolyfillProvider  # noqa: E402
from inject_polyfills.plugin import PolyfillPlugin  # noqa: E402

# Load the bundled providers so the snapshot below contains them.
registry.load_providers()


class RecordingProvider(PolyfillProvider):
  """
  Provider implementing every method by recording its input.

  ``respond`` decides the return value; it receives the same arguments as
  the callback.
  """

  def __init__(self, name: str = "recorder", respond: Optional[Callable[..., Any]] = None):
    self.name = name
    self.respond = respond
    self.calls: List[Tuple[Any, Any]] = []

  def _record(self, report, utils, anchor):
    self.calls.append((report, anchor))
    if self.respond is not None:
      return self.respond(report, utils, anchor)
    return None

  entry_global = _record
  usage_global = _record
  usage_pure = _record

  @property
  def reports(self) -> list:
    return [report for report, _ in self.calls]


def factory_for(provider: Any) -> Callable[[Any, dict], Any]:
  """Wraps an instance in a provider factory."""

  def factory(api, options):
    provider.api = api
    return provider

  factory.__name__ = getattr(provider, "name", "provider")
  return factory


@pytest.fixture
def recorder_cls() -> type:
  """The RecordingProvider class."""
  return RecordingProvider


@pytest.fixture
def make_plugin() -> Callable[..., PolyfillPlugin]:
  """
  Builds a plugin around provider instances, targeting Python >= 3.8.
  """

  def _make(*providers: Any, method: str = "usage-global", **options: Any) -> PolyfillPlugin:
    options.setdefault("targets", ">=3.8")
    return PolyfillPlugin(method=method, providers=[factory_for(p) for p in providers], **options)

  return _make


@pytest.fixture
def collect(make_plugin) -> Callable[..., list]:
  """
  Returns the reports dispatched while transforming ``code``.
  """

  def _collect(code: str, method: str = "usage-global") -> list:
    recorder = RecordingProvider()
    make_plugin(recorder, method=method).transform(code)
    return recorder.reports

  return _collect


@pytest.fixture(autouse=True)
def isolate_provider_registry():
  """
  Ensures providers registered by a test do not leak into the next one.
  """
  original_registry = registry._PROVIDERS.copy()
  yield
  registry._PROVIDERS.clear()
  registry._PROVIDERS.update(original_registry)
