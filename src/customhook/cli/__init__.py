"""
CLI module for customhook.

Provides the command-line interface using Click.
"""

from customhook.cli.main import cli, main

__all__ = ["main", "cli"]
