"""
Tags router package.
"""

from .tags_router import router

__all__ = ["router"]
