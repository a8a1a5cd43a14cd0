"""
Review use cases.

Every create, update and delete re-derives the movie's rating aggregate in
the same transaction as the review change, then commits once. If anything
fails before the commit, neither the review nor the aggregate changes.
"""

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from cinereview.aggregation import recompute_movie_rating
from cinereview.auth import ensure_owner_or_admin
from cinereview.errors import ConflictError, NotFoundError, StoreError
from cinereview.logging_config import get_logger
from cinereview.logging_context import bind_context
from cinereview.metrics import track_review_mutation
from cinereview.models import db, RecordStatus, Review, User, utcnow
from cinereview.pagination import Page, paginate
from cinereview.schemas import PageQuery, ReviewCreate, ReviewUpdate
from cinereview.services import commit_or_raise
from cinereview.services.catalog import get_active_movie

logger = get_logger(__name__)


def _already_reviewed() -> ConflictError:
    return ConflictError('You have already reviewed this movie', 'already_reviewed')


def _recompute(movie_id: int, conflict=None):
    """
    Re-derive the movie aggregate; the flush inside also writes pending review changes.

    Raises:
        ServiceError: `conflict` when the flush hits a uniqueness constraint
        StoreError: on any other store failure; the session is rolled back first
    """
    try:
        recompute_movie_rating(movie_id)
    except IntegrityError as e:
        db.session.rollback()
        if conflict is not None:
            logger.info("rating_recompute_conflict", movie_id=movie_id)
            raise conflict from e
        logger.error("rating_recompute_failed", movie_id=movie_id, error=str(e.orig))
        raise StoreError(original_error=e) from e
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("rating_recompute_failed", movie_id=movie_id, error=str(e))
        raise StoreError(original_error=e) from e


def get_active_review(review_id: int) -> Review:
    review = db.session.get(Review, review_id)
    if review is None or not review.is_active:
        raise NotFoundError('Review not found')
    return review


def list_movie_reviews(movie_id: int, params: PageQuery) -> Page:
    """Active reviews of an active movie, newest first."""
    movie = get_active_movie(movie_id)
    query = (
        Review.query
        .filter(Review.movie_id == movie.id, Review.status == RecordStatus.ACTIVE)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return paginate(query, params.page, params.limit)


def list_user_reviews(user_id: int, params: PageQuery) -> Page:
    """Active reviews written by an active user, newest first."""
    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        raise NotFoundError('User not found')
    query = (
        Review.query
        .filter(Review.user_id == user.id, Review.status == RecordStatus.ACTIVE)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return paginate(query, params.page, params.limit)


def create_review(user: User, movie_id: int, payload: ReviewCreate) -> Review:
    """
    Post the first review of `user` for a movie.

    A user who reviewed the movie before, even if that review was later
    removed, cannot post a second one.

    Raises:
        NotFoundError: if the movie is missing or removed
        ConflictError: if the user already reviewed the movie
    """
    bind_context(movie_id=movie_id)
    movie = get_active_movie(movie_id)

    existing = Review.query.filter_by(user_id=user.id, movie_id=movie.id).first()
    if existing is not None:
        raise _already_reviewed()

    review = Review(
        user_id=user.id,
        movie_id=movie.id,
        rating=payload.rating,
        review_text=payload.review_text,
        status=RecordStatus.ACTIVE,
    )
    db.session.add(review)
    # A concurrent request may insert the same pair after the check above
    _recompute(movie.id, conflict=_already_reviewed())
    commit_or_raise("create_review", conflict=_already_reviewed())

    track_review_mutation('create')
    logger.info("review_created", review_id=review.id, rating=review.rating)
    return review


def update_review(user: User, review_id: int, payload: ReviewUpdate) -> Review:
    """
    Edit the rating and/or text of an active review.

    Raises:
        NotFoundError: if the review is missing or removed
        PermissionDeniedError: if `user` is neither the author nor an admin
    """
    review = get_active_review(review_id)
    bind_context(movie_id=review.movie_id, review_id=review.id)
    ensure_owner_or_admin(user, review.user_id, 'You can only edit your own reviews')

    changes = payload.changes()
    for field, value in changes.items():
        setattr(review, field, value)
    if changes:
        review.is_edited = True
        review.edited_at = utcnow()

    _recompute(review.movie_id)
    commit_or_raise("update_review")

    track_review_mutation('update')
    logger.info("review_updated", fields=sorted(changes))
    return review


def delete_review(user: User, review_id: int) -> Review:
    """
    Soft-delete a review; it stops counting toward the movie's rating.

    Raises:
        NotFoundError: if the review is missing or already removed
        PermissionDeniedError: if `user` is neither the author nor an admin
    """
    review = get_active_review(review_id)
    bind_context(movie_id=review.movie_id, review_id=review.id)
    ensure_owner_or_admin(user, review.user_id, 'You can only delete your own reviews')

    review.status = RecordStatus.REMOVED
    _recompute(review.movie_id)
    commit_or_raise("delete_review")

    track_review_mutation('delete')
    logger.info("review_removed")
    return review
