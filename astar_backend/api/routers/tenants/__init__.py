"""
Tenants router package.

Exports the router for the caller's tenant and its members.
"""

from .tenants_router import router

__all__ = ["router"]
