"""
CLI runner module.

Provides commands:
- init-config: Write a default config file
- status: Show configured stores and pipes
- fetch: Read a remote collection into a store and query it
"""

from .main import create_cli, main

__all__ = [
    "create_cli",
    "main",
]
