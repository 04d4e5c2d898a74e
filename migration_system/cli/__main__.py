"""
CLI Main Module

Entry point for running the migration system CLI as a module.
"""

import sys

from .main import main

if __name__ == "__main__":
    sys.exit(main())
