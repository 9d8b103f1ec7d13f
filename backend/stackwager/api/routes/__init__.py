"""API routes package.

This package contains all API route handlers for the application.
"""
from . import simulate
from . import placements
from . import presets

__all__ = [
    "simulate",
    "placements",
    "presets",
]
