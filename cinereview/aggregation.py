"""
Movie rating aggregation.

A movie's average_rating/total_reviews pair always mirrors its active
reviews. The review service calls recompute_movie_rating explicitly after
every review create, update or delete, inside the same transaction, and
commits once afterwards. The recompute always starts from scratch so a
drifted aggregate corrects itself on the next review change.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

from sqlalchemy import func

from cinereview.logging_config import get_logger
from cinereview.logging_metrics import track_phase
from cinereview.metrics import track_recompute
from cinereview.models import db, Movie, Review, RecordStatus

logger = get_logger(__name__)

_ONE_DECIMAL = Decimal("0.1")


def round_rating(total: int, count: int) -> float:
    """
    Mean of `count` ratings summing to `total`, rounded half-up to one decimal.

    Computed in Decimal so that e.g. 13/4 = 3.25 rounds to 3.3.
    """
    if count <= 0:
        return 0.0
    mean = Decimal(total) / Decimal(count)
    return float(mean.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def active_rating_stats(movie_id: int) -> Tuple[int, int]:
    """Return (sum of ratings, number of reviews) over the movie's active reviews."""
    total, count = db.session.query(
        func.coalesce(func.sum(Review.rating), 0),
        func.count(Review.id),
    ).filter(
        Review.movie_id == movie_id,
        Review.status == RecordStatus.ACTIVE,
    ).one()
    return int(total), int(count)


@track_recompute
def recompute_movie_rating(movie_id: int) -> Optional[Movie]:
    """
    Recompute and store a movie's rating aggregate from its active reviews.

    Flushes but does not commit; the caller owns the transaction.

    Args:
        movie_id: ID of the movie whose review set changed

    Returns:
        The updated Movie, or None if no such movie exists
    """
    with track_phase("rating_recompute", movie_id=movie_id):
        # Pending review changes must be visible to the aggregate query
        db.session.flush()

        movie = db.session.get(Movie, movie_id)
        if movie is None:
            logger.warning("rating_recompute_skipped", movie_id=movie_id, reason="movie_not_found")
            return None

        total, count = active_rating_stats(movie_id)
        movie.average_rating = round_rating(total, count)
        movie.total_reviews = count
        db.session.flush()

        logger.info(
            "rating_recomputed",
            movie_id=movie_id,
            average_rating=movie.average_rating,
            total_reviews=movie.total_reviews,
        )
        return movie


def recompute_all_ratings() -> int:
    """
    Re-derive the aggregate of every movie and commit.

    Returns:
        Number of movies recomputed
    """
    movie_ids = [row[0] for row in db.session.query(Movie.id).all()]
    try:
        for movie_id in movie_ids:
            recompute_movie_rating(movie_id)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    logger.info("all_ratings_recomputed", movie_count=len(movie_ids))
    return len(movie_ids)
