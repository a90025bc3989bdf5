"""
localzone CLI - Command-line lookups against the timezone engine.

Usage:
    localzone lookup 24.105078 56.946285
    localzone --dataset mock lookup --one 0 0
"""

from .cli import main

__all__ = ["main"]
