"""
Main Entry Point for the inject-polyfills CLI.

Parses arguments, loads ``[tool.inject_polyfills]`` from the nearest
pyproject.toml, and applies the plugin to one Python file.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import libcst as cst

from inject_polyfills import __version__
from inject_polyfills.config import PluginConfig
from inject_polyfills.enums import Method, SourceType
from inject_polyfills.errors import ConfigurationError
from inject_polyfills.plugin import PolyfillPlugin
from inject_polyfills.utils.console import configure_logging, log_error, log_success


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, 1 for failure).
  """
  parser = argparse.ArgumentParser(description="inject-polyfills: inject backport imports for used stdlib features")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("path", type=Path, help="Python file to transform")
  parser.add_argument(
    "--method",
    choices=[m.value for m in Method],
    default=None,
    help="Polyfilling method (default: from toml)",
  )
  parser.add_argument(
    "--provider",
    action="append",
    default=None,
    help="Provider name or 'package.module:factory' (repeatable; default: from toml)",
  )
  parser.add_argument("--targets", default=None, help="Python version specifier, e.g. '>=3.8'")
  parser.add_argument(
    "--ignore-project-config",
    action="store_true",
    default=None,
    help="Do not derive targets from requires-python",
  )
  parser.add_argument("--script", action="store_true", help="Inject __import__ assignments instead of imports")
  parser.add_argument("--out", type=Path, help="Output file (default: stdout)")
  parser.add_argument("-v", "--verbose", action="store_true", help="Log dispatch and injection details")

  args = parser.parse_args(argv)
  configure_logging(args.verbose)

  if not args.path.is_file():
    log_error(f"Input not found: {args.path}")
    return 1

  try:
    config = PluginConfig.load(
      search_path=args.path.parent,
      method=args.method,
      providers=args.provider,
      targets=args.targets,
      ignore_project_config=args.ignore_project_config,
      source_type=SourceType.SCRIPT if args.script else None,
    )
    plugin = PolyfillPlugin(config)
  except ConfigurationError as e:
    log_error(f"Invalid configuration: {e}")
    return 1

  try:
    result = plugin.transform(args.path.read_text(encoding="utf-8"))
  except cst.ParserSyntaxError as e:
    log_error(f"Cannot parse {args.path}: {e}")
    return 1

  if args.out:
    args.out.write_text(result, encoding="utf-8")
    log_success(f"Wrote [path]{args.out}[/path]")
  else:
    sys.stdout.write(result)
  return 0


if __name__ == "__main__":
  sys.exit(main())
