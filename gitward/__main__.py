"""Entry point for running gitward as a module.

This module allows gitward to be run as a Python module using the -m flag:
    python -m gitward
"""

from . import cli

if __name__ == "__main__":
    cli._main()
