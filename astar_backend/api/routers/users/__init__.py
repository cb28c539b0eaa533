"""
Users router package.

Exports the router for user accounts and profiles.
"""

from .users_router import router

__all__ = ["router"]
