"""
Records router package.
"""

from .records_router import router

__all__ = ["router"]
