"""
The MovieStore interface shared by the HTTP and demo implementations.

Both stores return the server's JSON shapes (camelCase keys, `_id` and `id`)
so callers never need to know which one served a call.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class MovieStore(ABC):
    """Operations of the CineReview HTTP surface, as seen by a client."""

    # --- Authentication ---

    @abstractmethod
    def register(self, username: str, email: str, password: str) -> Dict[str, Any]:
        """Returns {"token", "user"}."""

    @abstractmethod
    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Returns {"token", "user"}."""

    @abstractmethod
    def get_current_user(self) -> Dict[str, Any]:
        pass

    # --- Catalog ---

    @abstractmethod
    def list_movies(self, page: int = 1, limit: int = 12, search: Optional[str] = None,
                    genre: Optional[str] = None, year: Optional[int] = None,
                    min_rating: Optional[float] = None, sort_by: str = "newest") -> Dict[str, Any]:
        """Returns {"movies", "pagination"}."""

    @abstractmethod
    def featured_movies(self) -> Dict[str, List[Dict[str, Any]]]:
        """Returns {"featured", "recent"}."""

    @abstractmethod
    def get_movie(self, movie_id) -> Dict[str, Any]:
        """Movie payload plus "reviews" and "isInWatchlist"."""

    # --- Reviews ---

    @abstractmethod
    def list_movie_reviews(self, movie_id, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        """Returns {"reviews", "pagination"}."""

    @abstractmethod
    def add_review(self, movie_id, rating: int, review_text: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    def update_review(self, review_id, rating: Optional[int] = None,
                      review_text: Optional[str] = None) -> Dict[str, Any]:
        pass

    @abstractmethod
    def delete_review(self, review_id) -> None:
        pass

    @abstractmethod
    def list_user_reviews(self, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        pass

    # --- Profile and watchlist ---

    @abstractmethod
    def get_profile(self) -> Dict[str, Any]:
        """Profile fields plus "watchlist" and "reviewCount"."""

    @abstractmethod
    def update_profile(self, **changes) -> Dict[str, Any]:
        """Accepts username, bio, profilePicture, favoriteGenres."""

    @abstractmethod
    def get_watchlist(self) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def add_to_watchlist(self, movie_id) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def remove_from_watchlist(self, movie_id) -> List[Dict[str, Any]]:
        pass

    def reset(self) -> None:
        """Drop session-scoped state. Stores without any keep this no-op."""
