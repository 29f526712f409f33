#!/usr/bin/env python3
"""Entry point for ``python -m prenomkit``."""

import sys

from prenomkit.cli import main

if __name__ == '__main__':
    sys.exit(main())
