"""
Module execution entry point.

Allows running with: python -m stake_cli
"""

import sys
from stake_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
