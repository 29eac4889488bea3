"""
CLI module for Jestify.

Provides the command-line interface using Click.
"""

from jestify.cli.main import cli, main

__all__ = ["main", "cli"]
