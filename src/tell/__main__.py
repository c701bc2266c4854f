#!/usr/bin/env python3
"""
Launcher for ``python -m tell``.

This is a thin wrapper around the CLI entry point.
"""

import sys

from tell.interfaces.cli import main

if __name__ == "__main__":
    sys.exit(main())
