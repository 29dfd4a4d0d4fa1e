"""
Entry point for module execution (``python -m pairlint``).

This module delegates execution to the CLI handler in ``pairlint.cli.__main__``.
"""

import sys
from pairlint.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
