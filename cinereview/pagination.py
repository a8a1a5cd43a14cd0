"""Offset pagination over SQLAlchemy queries."""

import math
from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass
class Page:
    """One page of results plus the metadata clients need to navigate."""
    items: List[Any]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page * self.limit < self.total

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def metadata(self, total_key: str) -> Dict[str, Any]:
        """
        Pagination block of a listing response.

        Args:
            total_key: Wire name of the total count ("totalMovies", "totalReviews")
        """
        return {
            'currentPage': self.page,
            'totalPages': self.total_pages,
            total_key: self.total,
            'limit': self.limit,
            'hasNext': self.has_next,
            'hasPrev': self.has_prev,
        }


def paginate(query, page: int, limit: int) -> Page:
    """Run `query` (already ordered) for one page and count its full result set."""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return Page(items=items, page=page, limit=limit, total=total)
