"""
Common response models.

Dependencies: pydantic
System role: Common API response structures
"""

from pydantic import BaseModel


class CountResponse(BaseModel):
    """Number of rows affected by a bulk operation."""

    count: int
