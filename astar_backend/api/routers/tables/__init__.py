"""
Tables router package.

Exports the router for flexible tables and their schemas.
"""

from .tables_router import router

__all__ = ["router"]
