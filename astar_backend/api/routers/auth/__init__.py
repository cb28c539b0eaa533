"""
Auth router package.

Exports the router for caller identity endpoints.
"""

from .auth_router import router

__all__ = ["router"]
