"""
Prometheus metrics for CineReview application.

This module provides metrics collection for monitoring request traffic,
review activity, rating aggregation, authentication failures, watchlist
usage and client demo-mode fallbacks.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from functools import wraps
import time


# API Request Metrics
http_requests_total = Counter(
    'cinereview_http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'cinereview_http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Review Metrics
review_mutations_total = Counter(
    'cinereview_review_mutations_total',
    'Total number of committed review mutations',
    ['action']  # create, update, delete
)

# Aggregation Metrics
rating_recomputes_total = Counter(
    'cinereview_rating_recomputes_total',
    'Total number of movie rating recomputations',
    ['status']  # success, error
)

rating_recompute_duration_seconds = Histogram(
    'cinereview_rating_recompute_duration_seconds',
    'Movie rating recomputation duration in seconds'
)

# Auth Metrics
auth_failures_total = Counter(
    'cinereview_auth_failures_total',
    'Total number of rejected credentials',
    ['reason']  # missing, invalid, expired, user_not_found, invalid_credentials
)

# Watchlist Metrics
watchlist_operations_total = Counter(
    'cinereview_watchlist_operations_total',
    'Total number of watchlist operations',
    ['action', 'outcome']  # add/remove, added/removed/duplicate/absent
)

# Client Metrics
demo_fallbacks_total = Counter(
    'cinereview_demo_fallbacks_total',
    'Total number of client calls served by the offline demo store',
    ['operation']
)


def track_recompute(func):
    """
    Decorator to track rating recompute metrics.

    Usage:
        @track_recompute
        def recompute_movie_rating(movie_id):
            ...
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        status = 'success'
        try:
            return func(*args, **kwargs)
        except Exception:
            status = 'error'
            raise
        finally:
            rating_recomputes_total.labels(status=status).inc()
            rating_recompute_duration_seconds.observe(time.time() - start_time)
    return wrapper


def track_review_mutation(action):
    """
    Record a committed review mutation.

    Args:
        action: One of 'create', 'update', 'delete'
    """
    review_mutations_total.labels(action=action).inc()


def track_auth_failure(reason):
    """Record a rejected credential by reason."""
    auth_failures_total.labels(reason=reason).inc()


def track_watchlist_operation(action, outcome):
    """
    Record a watchlist operation.

    Args:
        action: 'add' or 'remove'
        outcome: 'added', 'duplicate', 'removed' or 'absent'
    """
    watchlist_operations_total.labels(action=action, outcome=outcome).inc()


def track_demo_fallback(operation):
    """Record a client call that fell back to the demo store."""
    demo_fallbacks_total.labels(operation=operation).inc()


def get_metrics():
    """
    Generate Prometheus metrics in text format.

    Returns:
        Tuple of (metrics_text, content_type)
    """
    return generate_latest(), CONTENT_TYPE_LATEST
