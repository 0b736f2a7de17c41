# This project was developed with assistance from AI tools.
"""Shared schema components."""

from pydantic import BaseModel


class Pagination(BaseModel):
    """Page-based pagination metadata mirrored from the resident directory."""

    total: int
    page: int
    limit: int
    total_pages: int

    @property
    def has_more(self) -> bool:
        return self.page < self.total_pages
