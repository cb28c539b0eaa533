"""
Workspaces router package.
"""

from .workspaces_router import router

__all__ = ["router"]
