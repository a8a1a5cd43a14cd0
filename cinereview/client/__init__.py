"""
Client library for the CineReview API.

    from cinereview.client import CineReviewClient
    client = CineReviewClient()
    client.login("user@test.com", "secret")
    client.list_movies(genre="Drama", sort_by="rating")
"""

from cinereview.client.base import MovieStore
from cinereview.client.demo_store import DemoStore
from cinereview.client.errors import (
    AuthError,
    ClientError,
    ClientValidationError,
    ConflictError,
    NotFoundError,
    StorageError,
    TransientError,
)
from cinereview.client.fallback import CineReviewClient
from cinereview.client.http_store import HttpStore

__all__ = [
    "AuthError",
    "CineReviewClient",
    "ClientError",
    "ClientValidationError",
    "ConflictError",
    "DemoStore",
    "HttpStore",
    "MovieStore",
    "NotFoundError",
    "StorageError",
    "TransientError",
]
