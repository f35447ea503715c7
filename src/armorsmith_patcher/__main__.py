#!/usr/bin/env python3
"""
Armorsmith Patcher main entry point

Allows running the patcher with ``python -m armorsmith_patcher``.
"""

import sys

from armorsmith_patcher.main import main


def cli_main():
    """Synchronous entry point for CLI usage."""
    sys.exit(main())


if __name__ == "__main__":
    cli_main()
