"""Command line interface for cart-manager.

The ``cli`` group is the console-script entry point ``cartmanager``.
"""
from __future__ import annotations

from cartmanager.cli.main import cli

__all__ = ["cli"]
