"""Bankhook CLI package.

This package provides the command-line interface for running the server and
inspecting or resetting the stored connection record.
"""

from .main import app, main

__all__ = ["app", "main"]
