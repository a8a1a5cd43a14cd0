"""
CineReviewClient: the API with an offline safety net.

Every call goes to the remote store first. When it fails with a
TransientError (network unavailable, timeout, server failure) the same call
is served by the demo store and a warning is logged. Authentication,
validation, not-found and conflict errors are answers from the server and
propagate unchanged.
"""

from functools import wraps
from typing import Optional

from cinereview.client.base import MovieStore
from cinereview.client.demo_store import DemoStore
from cinereview.client.errors import TransientError
from cinereview.client.http_store import HttpStore
from cinereview.logging_config import get_logger
from cinereview.metrics import track_demo_fallback

logger = get_logger(__name__)


def _with_fallback(method):
    """Run `method` on the remote store, on the fallback store if the network is down."""
    name = method.__name__

    @wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            result = getattr(self.remote, name)(*args, **kwargs)
        except TransientError as e:
            if self.fallback is None:
                raise
            logger.warning(
                "demo_mode_fallback",
                operation=name,
                status_code=e.status_code,
                error=e.message,
            )
            track_demo_fallback(name)
            self.demo_mode = True
            return getattr(self.fallback, name)(*args, **kwargs)
        self.demo_mode = False
        return result
    return wrapper


class CineReviewClient(MovieStore):
    """
    MovieStore that prefers `remote` and falls back to `fallback`.

    Args:
        remote: Store talking to the API (HttpStore by default)
        fallback: Store used while the API is unreachable (in-memory DemoStore
            by default); None disables demo mode

    `demo_mode` tells whether the last call was served by the fallback.

    Each store method below is a delegate: `_with_fallback` runs the method of
    the same name on `remote`, or on `fallback` when the remote is unreachable.
    """

    def __init__(self, remote: Optional[MovieStore] = None, fallback: Optional[MovieStore] = None,
                 enable_demo: bool = True):
        self.remote = remote or HttpStore()
        self.fallback = fallback if fallback is not None else (DemoStore() if enable_demo else None)
        self.demo_mode = False

    @_with_fallback
    def register(self, username, email, password):
        """Create an account and keep its token."""

    @_with_fallback
    def login(self, email, password):
        """Sign in and keep the token."""

    @_with_fallback
    def get_current_user(self):
        """The signed-in user."""

    @_with_fallback
    def list_movies(self, page=1, limit=12, search=None, genre=None, year=None,
                    min_rating=None, sort_by="newest"):
        """One page of the filtered, sorted catalog."""

    @_with_fallback
    def featured_movies(self):
        """Top-rated and most recent movies."""

    @_with_fallback
    def get_movie(self, movie_id):
        """Movie detail with its newest reviews."""

    @_with_fallback
    def list_movie_reviews(self, movie_id, page=1, limit=10):
        """One page of a movie's reviews, newest first."""

    @_with_fallback
    def add_review(self, movie_id, rating, review_text):
        """Post the user's review of a movie."""

    @_with_fallback
    def update_review(self, review_id, rating=None, review_text=None):
        """Edit the rating and/or text of a review."""

    @_with_fallback
    def delete_review(self, review_id):
        """Remove a review."""

    @_with_fallback
    def list_user_reviews(self, page=1, limit=10):
        """One page of the user's reviews, newest first."""

    @_with_fallback
    def get_profile(self):
        """Profile with watchlist and review count."""

    @_with_fallback
    def update_profile(self, **changes):
        """Change the writable profile fields."""

    @_with_fallback
    def get_watchlist(self):
        """The watchlist in insertion order."""

    @_with_fallback
    def add_to_watchlist(self, movie_id):
        """Add a movie to the watchlist."""

    @_with_fallback
    def remove_from_watchlist(self, movie_id):
        """Remove a movie from the watchlist, if present."""

    def logout(self):
        """End the session: forget the token and discard demo-mode state."""
        self.reset()
        logger.info("client_logged_out")

    def reset(self) -> None:
        self.remote.reset()
        if self.fallback is not None:
            self.fallback.reset()
        self.demo_mode = False
