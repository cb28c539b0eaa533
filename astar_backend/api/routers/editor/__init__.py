"""
Editor router package.

Exports the router for the folder/document tree.
"""

from .editor_router import router

__all__ = ["router"]
