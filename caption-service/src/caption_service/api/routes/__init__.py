"""API route modules."""

from . import captions

__all__ = ["captions"]
