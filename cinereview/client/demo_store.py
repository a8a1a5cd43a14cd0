"""
DemoStore: offline stand-in for the CineReview API.

Serves the sample catalog to a single demo user and keeps that user's
reviews, watchlist and profile either in memory or in a JSON file. It
enforces the same rules as the server:

- one review per (user, movie), a removed review included -> ConflictError
- every review change re-derives the movie's averageRating/totalReviews
  from its active reviews
- watchlist add of a present movie -> ConflictError; remove of an absent
  movie is a no-op; entries listed in insertion order
- catalog filters, sort keys and pagination behave like GET /movies
- a change whose state file cannot be written is rolled back -> StorageError

reset() puts the store back into its seeded state; the client calls it on
logout so demo data never outlives the session.
"""

import copy
import json
import os
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from cinereview.aggregation import round_rating
from cinereview.client.base import MovieStore
from cinereview.client.errors import (
    AuthError,
    ClientValidationError,
    ConflictError,
    NotFoundError,
    StorageError,
)
from cinereview.client.sample_data import DEMO_ACCOUNTS, DEMO_PROFILE, SAMPLE_MOVIES
from cinereview.errors import ValidationFailedError
from cinereview.logging_config import get_logger
from cinereview.models import DEFAULT_POSTER_URL
from cinereview.pagination import Page
from cinereview.schemas import (
    LoginRequest,
    MovieListQuery,
    PageQuery,
    ProfileUpdate,
    RegisterRequest,
    ReviewCreate,
    ReviewUpdate,
)

logger = get_logger(__name__)

DETAIL_REVIEW_LIMIT = 10
FEATURED_LIMIT = 6

# ProfileUpdate attribute -> wire name
PROFILE_FIELDS = {
    "username": "username",
    "bio": "bio",
    "profile_picture": "profilePicture",
    "favorite_genres": "favoriteGenres",
}


def _now() -> str:
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat()


def _validate(schema, data: Dict[str, Any]) -> BaseModel:
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        error = ValidationFailedError.from_pydantic(e)
        raise ClientValidationError(error.message, error.details) from e


def _seed_movie(index: int, sample: Dict[str, Any]) -> Dict[str, Any]:
    # Later samples count as more recently added
    created_at = f"2024-01-{index + 1:02d}T00:00:00"
    movie = {
        "_id": sample["_id"],
        "id": sample["_id"],
        "title": sample["title"],
        "genre": list(sample["genre"]),
        "releaseYear": sample["releaseYear"],
        "director": sample["director"],
        "cast": list(sample.get("cast", [])),
        "synopsis": sample["synopsis"],
        "posterUrl": sample.get("posterUrl") or DEFAULT_POSTER_URL,
        "trailerUrl": sample.get("trailerUrl", ""),
        "duration": sample["duration"],
        "language": sample.get("language", "English"),
        "averageRating": 0.0,
        "totalReviews": 0,
        "status": "active",
        "createdAt": created_at,
        "updatedAt": created_at,
    }
    return movie


def seed_state() -> Dict[str, Any]:
    """Fresh demo state: the sample catalog, no reviews, empty watchlist."""
    return {
        "movies": [_seed_movie(i, sample) for i, sample in enumerate(SAMPLE_MOVIES)],
        "reviews": [],
        "watchlist": [],
        "profile": copy.deepcopy(DEMO_PROFILE),
        "nextReviewId": 1,
    }


def _movie_order(movie: Dict[str, Any]) -> int:
    movie_id = str(movie["_id"])
    return int(movie_id) if movie_id.isdigit() else 0


def _summary(movie: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "_id": movie["_id"],
        "id": movie["_id"],
        "title": movie["title"],
        "posterUrl": movie["posterUrl"],
        "releaseYear": movie["releaseYear"],
        "averageRating": movie["averageRating"],
        "genre": list(movie["genre"]),
        "director": movie["director"],
    }


class DemoStore(MovieStore):
    """
    MovieStore kept on this machine.

    Args:
        path: JSON file holding the demo state; None keeps it in memory only
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path
        self._lock = threading.Lock()
        self._state = self._load()

    # --- Persistence ---

    def _load(self) -> Dict[str, Any]:
        if self.path and os.path.exists(self.path):
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    state = json.load(f)
                logger.debug("demo_state_loaded", path=self.path)
                return state
            except (OSError, ValueError) as e:
                logger.warning("demo_state_unreadable", path=self.path, error=str(e))
        return seed_state()

    def _save(self):
        if not self.path:
            return
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._state, f, indent=2)
        os.replace(tmp_path, self.path)

    @contextmanager
    def _mutation(self):
        """
        Hold the lock for one change and persist it.

        If the change or the write fails the previous state is restored, so a
        failed call leaves nothing visible.

        Raises:
            StorageError: if the state file cannot be written
        """
        with self._lock:
            snapshot = copy.deepcopy(self._state)
            try:
                yield
                self._save()
            except OSError as e:
                self._state = snapshot
                logger.error("demo_state_write_failed", path=self.path, error=str(e))
                raise StorageError(f"Could not save demo state: {e}", original_error=e) from e
            except Exception:
                self._state = snapshot
                raise

    def reset(self) -> None:
        """Discard demo reviews, watchlist and profile edits."""
        with self._mutation():
            self._state = seed_state()
        logger.info("demo_state_reset")

    # --- Lookups ---

    @property
    def _profile(self) -> Dict[str, Any]:
        return self._state["profile"]

    def _user_summary(self) -> Dict[str, Any]:
        return {
            "_id": self._profile["_id"],
            "id": self._profile["_id"],
            "username": self._profile["username"],
            "profilePicture": self._profile.get("profilePicture", ""),
        }

    def _find_movie(self, movie_id) -> Optional[Dict[str, Any]]:
        for movie in self._state["movies"]:
            if str(movie["_id"]) == str(movie_id):
                return movie
        return None

    def _active_movie(self, movie_id) -> Dict[str, Any]:
        movie = self._find_movie(movie_id)
        if movie is None or movie["status"] != "active":
            raise NotFoundError("Movie not found")
        return movie

    def _active_movies(self) -> List[Dict[str, Any]]:
        return [m for m in self._state["movies"] if m["status"] == "active"]

    def _active_review(self, review_id) -> Dict[str, Any]:
        for review in self._state["reviews"]:
            if str(review["_id"]) == str(review_id) and review["status"] == "active":
                return review
        raise NotFoundError("Review not found")

    def _newest_reviews(self, **match) -> List[Dict[str, Any]]:
        # Reviews are appended, so reversed insertion order is newest first
        return [
            r for r in reversed(self._state["reviews"])
            if r["status"] == "active" and all(str(self._key(r, k)) == str(v) for k, v in match.items())
        ]

    @staticmethod
    def _key(review: Dict[str, Any], key: str):
        value = review[key]
        return value["_id"] if isinstance(value, dict) else value

    def _recompute(self, movie: Dict[str, Any]):
        ratings = [r["rating"] for r in self._newest_reviews(movieId=movie["_id"])]
        movie["averageRating"] = round_rating(sum(ratings), len(ratings))
        movie["totalReviews"] = len(ratings)
        movie["updatedAt"] = _now()
        logger.debug(
            "demo_rating_recomputed",
            movie_id=movie["_id"],
            average_rating=movie["averageRating"],
            total_reviews=movie["totalReviews"],
        )

    def _review_payload(self, review: Dict[str, Any], include_movie: bool = False) -> Dict[str, Any]:
        data = copy.deepcopy(review)
        if include_movie:
            movie = self._find_movie(review["movieId"])
            if movie is not None:
                data["movieId"] = _summary(movie)
        return data

    def _watchlist_payload(self) -> List[Dict[str, Any]]:
        entries = []
        for entry in self._state["watchlist"]:
            movie = self._find_movie(entry["movieId"])
            if movie is None or movie["status"] != "active":
                continue
            data = _summary(movie)
            data["addedAt"] = entry["addedAt"]
            entries.append(data)
        return entries

    # --- Authentication ---

    def register(self, username: str, email: str, password: str) -> Dict[str, Any]:
        payload = _validate(RegisterRequest, {"username": username, "email": email, "password": password})
        with self._mutation():
            self._profile.update({"username": payload.username, "email": payload.email, "updatedAt": _now()})
            user = copy.deepcopy(self._profile)
        return {"token": f"demo-token-{user['_id']}", "user": user}

    def login(self, email: str, password: str) -> Dict[str, Any]:
        payload = _validate(LoginRequest, {"email": email, "password": password})
        account = DEMO_ACCOUNTS.get(payload.email)
        if account is None:
            raise AuthError("Invalid credentials", 401, "invalid_credentials")
        with self._mutation():
            self._profile.update({
                "username": account["username"],
                "email": payload.email,
                "isAdmin": account["isAdmin"],
            })
            user = copy.deepcopy(self._profile)
        return {"token": f"demo-token-{user['_id']}", "user": user}

    def get_current_user(self) -> Dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._profile)

    # --- Catalog ---

    def list_movies(self, page: int = 1, limit: int = 12, search: Optional[str] = None,
                    genre: Optional[str] = None, year: Optional[int] = None,
                    min_rating: Optional[float] = None, sort_by: str = "newest") -> Dict[str, Any]:
        params = _validate(MovieListQuery, {
            "page": page,
            "limit": limit,
            "search": search,
            "genre": genre,
            "year": year,
            "minRating": min_rating,
            "sortBy": sort_by,
        })

        with self._lock:
            movies = self._active_movies()

            if params.search:
                term = params.search.lower()
                movies = [
                    m for m in movies
                    if term in m["title"].lower() or term in m["synopsis"].lower()
                    or term in m["director"].lower()
                ]
            if params.genre:
                movies = [m for m in movies if params.genre in m["genre"]]
            if params.year is not None:
                movies = [m for m in movies if m["releaseYear"] == params.year]
            if params.min_rating is not None:
                movies = [m for m in movies if m["averageRating"] >= params.min_rating]

            # Stable sorts: apply the id tie-breaker first
            movies.sort(key=_movie_order)
            if params.sort_by == "rating":
                movies.sort(key=lambda m: m["averageRating"], reverse=True)
            elif params.sort_by == "year":
                movies.sort(key=lambda m: m["releaseYear"], reverse=True)
            elif params.sort_by == "title":
                movies.sort(key=lambda m: m["title"])
            else:
                movies.sort(key=lambda m: (m["createdAt"], _movie_order(m)), reverse=True)

            start = (params.page - 1) * params.limit
            page_result = Page(
                items=copy.deepcopy(movies[start:start + params.limit]),
                page=params.page,
                limit=params.limit,
                total=len(movies),
            )

        return {"movies": page_result.items, "pagination": page_result.metadata("totalMovies")}

    def featured_movies(self) -> Dict[str, List[Dict[str, Any]]]:
        with self._lock:
            movies = sorted(self._active_movies(), key=_movie_order)
            featured = sorted(movies, key=lambda m: (m["averageRating"], m["totalReviews"]), reverse=True)
            recent = sorted(movies, key=lambda m: (m["createdAt"], _movie_order(m)), reverse=True)
            return {
                "featured": copy.deepcopy(featured[:FEATURED_LIMIT]),
                "recent": copy.deepcopy(recent[:FEATURED_LIMIT]),
            }

    def get_movie(self, movie_id) -> Dict[str, Any]:
        with self._lock:
            movie = self._active_movie(movie_id)
            data = copy.deepcopy(movie)
            data["reviews"] = [
                self._review_payload(r) for r in self._newest_reviews(movieId=movie["_id"])[:DETAIL_REVIEW_LIMIT]
            ]
            data["isInWatchlist"] = any(
                str(e["movieId"]) == str(movie["_id"]) for e in self._state["watchlist"]
            )
            return data

    # --- Reviews ---

    def list_movie_reviews(self, movie_id, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        params = _validate(PageQuery, {"page": page, "limit": limit})
        with self._lock:
            movie = self._active_movie(movie_id)
            reviews = self._newest_reviews(movieId=movie["_id"])
            start = (params.page - 1) * params.limit
            page_result = Page(
                items=[self._review_payload(r) for r in reviews[start:start + params.limit]],
                page=params.page,
                limit=params.limit,
                total=len(reviews),
            )
        return {"reviews": page_result.items, "pagination": page_result.metadata("totalReviews")}

    def add_review(self, movie_id, rating: int, review_text: str) -> Dict[str, Any]:
        payload = _validate(ReviewCreate, {"rating": rating, "reviewText": review_text})
        with self._mutation():
            movie = self._active_movie(movie_id)
            user_id = self._profile["_id"]

            # Removed reviews still count: one review per user per movie
            for existing in self._state["reviews"]:
                if str(existing["movieId"]) == str(movie["_id"]) and self._key(existing, "userId") == user_id:
                    raise ConflictError("You have already reviewed this movie", "already_reviewed")

            now = _now()
            review_id = f"demo-review-{self._state['nextReviewId']}"
            self._state["nextReviewId"] += 1
            review = {
                "_id": review_id,
                "id": review_id,
                "userId": self._user_summary(),
                "movieId": movie["_id"],
                "rating": payload.rating,
                "reviewText": payload.review_text,
                "isEdited": False,
                "editedAt": None,
                "helpfulVotes": 0,
                "reportCount": 0,
                "status": "active",
                "createdAt": now,
                "updatedAt": now,
            }
            self._state["reviews"].append(review)
            self._recompute(movie)
            result = self._review_payload(review)
        logger.info("demo_review_created", review_id=review_id, movie_id=result["movieId"])
        return result

    def update_review(self, review_id, rating: Optional[int] = None,
                      review_text: Optional[str] = None) -> Dict[str, Any]:
        payload = _validate(ReviewUpdate, {"rating": rating, "reviewText": review_text})
        with self._mutation():
            review = self._active_review(review_id)
            changes = payload.changes()
            if "rating" in changes:
                review["rating"] = changes["rating"]
            if "review_text" in changes:
                review["reviewText"] = changes["review_text"]
            if changes:
                now = _now()
                review["isEdited"] = True
                review["editedAt"] = now
                review["updatedAt"] = now

            movie = self._find_movie(review["movieId"])
            if movie is not None:
                self._recompute(movie)
            return self._review_payload(review)

    def delete_review(self, review_id) -> None:
        with self._mutation():
            review = self._active_review(review_id)
            review["status"] = "removed"
            review["updatedAt"] = _now()
            movie = self._find_movie(review["movieId"])
            if movie is not None:
                self._recompute(movie)
        logger.info("demo_review_removed", review_id=review_id)

    def list_user_reviews(self, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        params = _validate(PageQuery, {"page": page, "limit": limit})
        with self._lock:
            reviews = self._newest_reviews(userId=self._profile["_id"])
            start = (params.page - 1) * params.limit
            page_result = Page(
                items=[self._review_payload(r, include_movie=True) for r in reviews[start:start + params.limit]],
                page=params.page,
                limit=params.limit,
                total=len(reviews),
            )
        return {"reviews": page_result.items, "pagination": page_result.metadata("totalReviews")}

    # --- Profile and watchlist ---

    def get_profile(self) -> Dict[str, Any]:
        with self._lock:
            data = copy.deepcopy(self._profile)
            data["watchlist"] = self._watchlist_payload()
            data["reviewCount"] = len(self._newest_reviews(userId=self._profile["_id"]))
            return data

    def update_profile(self, **changes) -> Dict[str, Any]:
        payload = _validate(ProfileUpdate, changes)
        with self._mutation():
            for field, value in payload.changes().items():
                self._profile[PROFILE_FIELDS[field]] = value
            self._profile["updatedAt"] = _now()
            # Reviewer cards embed the username
            for review in self._state["reviews"]:
                if self._key(review, "userId") == self._profile["_id"]:
                    review["userId"] = self._user_summary()
            return copy.deepcopy(self._profile)

    def get_watchlist(self) -> List[Dict[str, Any]]:
        with self._lock:
            return self._watchlist_payload()

    def add_to_watchlist(self, movie_id) -> List[Dict[str, Any]]:
        with self._mutation():
            movie = self._active_movie(movie_id)
            if any(str(e["movieId"]) == str(movie["_id"]) for e in self._state["watchlist"]):
                raise ConflictError("Movie already in watchlist", "already_in_watchlist")
            self._state["watchlist"].append({"movieId": movie["_id"], "addedAt": _now()})
            return self._watchlist_payload()

    def remove_from_watchlist(self, movie_id) -> List[Dict[str, Any]]:
        with self._mutation():
            remaining = [e for e in self._state["watchlist"] if str(e["movieId"]) != str(movie_id)]
            if len(remaining) != len(self._state["watchlist"]):
                self._state["watchlist"] = remaining
            return self._watchlist_payload()
