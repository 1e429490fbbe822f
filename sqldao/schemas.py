"""
Public data shapes.
"""

from typing import Any

from pydantic import BaseModel, Field


class Paging(BaseModel):
    """Page request, completed in place by the paginator.

    ``index`` is the row offset of the window and ``size`` its row limit.
    ``count`` is the total number of matching rows; ``items`` stays ``None``
    when ``count`` is 0.
    """

    index: int = Field(default=0, ge=0)
    size: int = Field(default=10, ge=1)
    count: int | None = Field(default=None, ge=0)
    items: list[Any] | None = None
