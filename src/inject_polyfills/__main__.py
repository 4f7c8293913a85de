"""
Entry point for module execution (``python -m inject_polyfills``).

This module delegates execution to the CLI handler in ``inject_polyfills.cli.__main__``.
"""

import sys
from inject_polyfills.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
