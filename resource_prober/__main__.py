#!/usr/bin/env python3
"""
Entry point for running resource_prober as a module:
    python -m resource_prober [args]
"""
import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
