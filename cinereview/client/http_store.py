"""
HttpStore: MovieStore backed by the CineReview REST API.

Requests go through one requests.Session with bearer-token injection, a
per-request timeout, and retries with exponential backoff on transient
failures. Only idempotent methods are retried so a POST that reached the
server is never replayed.

Configuration via environment variables:
- CINEREVIEW_API_URL: Base URL including /api (default: http://localhost:5000/api)
- CINEREVIEW_CLIENT_TIMEOUT: Default timeout in seconds (default: 5.0)
- CINEREVIEW_CLIENT_MAX_RETRIES: Maximum retry attempts (default: 3)
- CINEREVIEW_CLIENT_BACKOFF_BASE: Base delay for exponential backoff in seconds (default: 0.5)
"""

import os
import time
from typing import Any, Dict, List, Optional

import requests

from cinereview.client.base import MovieStore
from cinereview.client.errors import ClientError, ClientErrorType, TransientError, error_from_body
from cinereview.logging_config import get_logger

logger = get_logger(__name__)

RETRYABLE_METHODS = frozenset({"GET", "PUT", "DELETE"})


class HttpStore(MovieStore):
    """HTTP client for the CineReview API with retry logic and error classification."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_base: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or os.getenv("CINEREVIEW_API_URL", "http://localhost:5000/api")).rstrip("/")
        self.token = token
        self.timeout = timeout or float(os.getenv("CINEREVIEW_CLIENT_TIMEOUT", "5.0"))
        if max_retries is None:
            max_retries = int(os.getenv("CINEREVIEW_CLIENT_MAX_RETRIES", "3"))
        self.max_retries = max_retries
        self.backoff_base = backoff_base if backoff_base is not None else float(
            os.getenv("CINEREVIEW_CLIENT_BACKOFF_BASE", "0.5"))

        # Session for connection pooling
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

        logger.info(
            "http_store_initialized",
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=self.max_retries,
        )

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _calculate_backoff(self, attempt: int) -> float:
        # 0.5s, 1s, 2s with the default base
        return self.backoff_base * (2 ** attempt)

    def _should_retry(self, method: str, error: ClientError, attempt: int) -> bool:
        if attempt >= self.max_retries:
            return False
        return method in RETRYABLE_METHODS and error.error_type == ClientErrorType.TRANSIENT

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return {}

    def _send(self, method: str, url: str, params, json_body, timeout) -> Any:
        """One attempt. Returns the decoded body or raises a classified ClientError."""
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=self._headers(),
                timeout=timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransientError(f"{type(e).__name__}: {e}", original_error=e) from e

        body = self._decode(response)
        if response.ok:
            return body
        raise error_from_body(response.status_code, body)

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Make a request with retry logic and error classification.

        Raises:
            AuthError, NotFoundError, ConflictError, ClientValidationError:
                non-retryable client errors, raised immediately
            TransientError: network or server failure after retries
        """
        url = f"{self.base_url}{path}"
        request_timeout = timeout or self.timeout
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        attempt = 0
        while True:
            try:
                logger.debug("http_store_request", method=method, url=url, attempt=attempt + 1)
                body = self._send(method, url, params, json_body, request_timeout)
                if attempt > 0:
                    logger.info("http_store_recovered", method=method, url=url, attempts=attempt + 1)
                return body
            except ClientError as e:
                logger.warning(
                    "http_store_request_failed",
                    method=method,
                    url=url,
                    status_code=e.status_code,
                    error_type=e.error_type.value,
                    error=e.message,
                )
                if not self._should_retry(method, e, attempt):
                    raise
                backoff_delay = self._calculate_backoff(attempt)
                logger.info("http_store_retrying", delay=backoff_delay, attempt=attempt + 1)
                time.sleep(backoff_delay)
                attempt += 1

    # --- Authentication ---

    def register(self, username: str, email: str, password: str) -> Dict[str, Any]:
        body = self._request("POST", "/auth/register",
                             json_body={"username": username, "email": email, "password": password})
        self.token = body.get("token")
        return {"token": body.get("token"), "user": body.get("user")}

    def login(self, email: str, password: str) -> Dict[str, Any]:
        body = self._request("POST", "/auth/login", json_body={"email": email, "password": password})
        self.token = body.get("token")
        return {"token": body.get("token"), "user": body.get("user")}

    def get_current_user(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/me")["user"]

    # --- Catalog ---

    def list_movies(self, page: int = 1, limit: int = 12, search: Optional[str] = None,
                    genre: Optional[str] = None, year: Optional[int] = None,
                    min_rating: Optional[float] = None, sort_by: str = "newest") -> Dict[str, Any]:
        params = {
            "page": page,
            "limit": limit,
            "search": search,
            "genre": genre,
            "year": year,
            "minRating": min_rating,
            "sortBy": sort_by,
        }
        return self._request("GET", "/movies", params=params)

    def featured_movies(self) -> Dict[str, List[Dict[str, Any]]]:
        return self._request("GET", "/movies/featured/trending")

    def get_movie(self, movie_id) -> Dict[str, Any]:
        return self._request("GET", f"/movies/{movie_id}")

    # --- Reviews ---

    def list_movie_reviews(self, movie_id, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        return self._request("GET", f"/reviews/movie/{movie_id}", params={"page": page, "limit": limit})

    def add_review(self, movie_id, rating: int, review_text: str) -> Dict[str, Any]:
        body = self._request("POST", f"/reviews/movie/{movie_id}",
                             json_body={"rating": rating, "reviewText": review_text})
        return body["review"]

    def update_review(self, review_id, rating: Optional[int] = None,
                      review_text: Optional[str] = None) -> Dict[str, Any]:
        changes = {"rating": rating, "reviewText": review_text}
        body = self._request("PUT", f"/reviews/{review_id}",
                             json_body={k: v for k, v in changes.items() if v is not None})
        return body["review"]

    def delete_review(self, review_id) -> None:
        self._request("DELETE", f"/reviews/{review_id}")

    def list_user_reviews(self, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        return self._request("GET", "/users/reviews", params={"page": page, "limit": limit})

    # --- Profile and watchlist ---

    def get_profile(self) -> Dict[str, Any]:
        return self._request("GET", "/users/profile")

    def update_profile(self, **changes) -> Dict[str, Any]:
        return self._request("PUT", "/users/profile", json_body=changes)["user"]

    def get_watchlist(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/users/watchlist")["watchlist"]

    def add_to_watchlist(self, movie_id) -> List[Dict[str, Any]]:
        return self._request("POST", f"/users/watchlist/{movie_id}")["watchlist"]

    def remove_from_watchlist(self, movie_id) -> List[Dict[str, Any]]:
        return self._request("DELETE", f"/users/watchlist/{movie_id}")["watchlist"]

    def reset(self) -> None:
        self.token = None

    def close(self):
        """Close the underlying session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
