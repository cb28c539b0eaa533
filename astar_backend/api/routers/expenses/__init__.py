"""
Expenses router package.
"""

from .expenses_router import router

__all__ = ["router"]
