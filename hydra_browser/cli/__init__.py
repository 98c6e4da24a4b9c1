"""
Command-line interface for inspecting and editing the persisted documents.
"""

from .app import app

__all__ = ["app"]
