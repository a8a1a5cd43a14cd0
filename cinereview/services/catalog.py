"""
Catalog use cases: listing, detail, featured sets and admin CRUD.

Only active movies are ever visible to readers. Removing a movie flips its
status to removed; the row, its reviews and watchlist entries stay.
"""

from typing import Any, Dict, Optional

from sqlalchemy import or_

from cinereview.errors import NotFoundError
from cinereview.logging_config import get_logger
from cinereview.models import db, Movie, MovieGenre, RecordStatus, Review, User, WatchlistEntry
from cinereview.pagination import Page, paginate
from cinereview.schemas import MovieCreate, MovieListQuery, MovieUpdate
from cinereview.services import commit_or_raise

logger = get_logger(__name__)

DETAIL_REVIEW_LIMIT = 10
FEATURED_LIMIT = 6

SORT_ORDERS = {
    'newest': (Movie.created_at.desc(), Movie.id.desc()),
    'rating': (Movie.average_rating.desc(), Movie.id.asc()),
    'year': (Movie.release_year.desc(), Movie.id.asc()),
    'title': (Movie.title.asc(), Movie.id.asc()),
}


def _escape_like(term: str) -> str:
    return term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


def active_movies():
    return Movie.query.filter(Movie.status == RecordStatus.ACTIVE)


def get_active_movie(movie_id: int) -> Movie:
    """
    Load an active movie.

    Raises:
        NotFoundError: if the movie does not exist or has been removed
    """
    movie = db.session.get(Movie, movie_id)
    if movie is None or not movie.is_active:
        raise NotFoundError('Movie not found')
    return movie


def list_movies(params: MovieListQuery) -> Page:
    """
    One page of active movies matching the optional filters.

    Args:
        params: Validated listing parameters (filters, sort key, page, limit)

    Returns:
        Page of Movie objects
    """
    query = active_movies()

    if params.search:
        pattern = f"%{_escape_like(params.search)}%"
        query = query.filter(or_(
            Movie.title.ilike(pattern, escape='\\'),
            Movie.synopsis.ilike(pattern, escape='\\'),
            Movie.director.ilike(pattern, escape='\\'),
        ))

    if params.genre:
        query = query.filter(Movie.genre_links.any(MovieGenre.name == params.genre))

    if params.year is not None:
        query = query.filter(Movie.release_year == params.year)

    if params.min_rating is not None:
        query = query.filter(Movie.average_rating >= params.min_rating)

    query = query.order_by(*SORT_ORDERS.get(params.sort_by, SORT_ORDERS['newest']))
    return paginate(query, params.page, params.limit)


def get_movie_detail(movie_id: int, viewer: Optional[User] = None) -> Dict[str, Any]:
    """
    Movie payload with its most recent active reviews and the viewer's
    watchlist membership (False for anonymous viewers).
    """
    movie = get_active_movie(movie_id)

    reviews = (
        Review.query
        .filter(Review.movie_id == movie.id, Review.status == RecordStatus.ACTIVE)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .limit(DETAIL_REVIEW_LIMIT)
        .all()
    )

    in_watchlist = False
    if viewer is not None:
        in_watchlist = db.session.query(
            WatchlistEntry.query.filter_by(user_id=viewer.id, movie_id=movie.id).exists()
        ).scalar()

    data = movie.to_dict()
    data['reviews'] = [review.to_dict() for review in reviews]
    data['isInWatchlist'] = bool(in_watchlist)
    return data


def featured_movies() -> Dict[str, list]:
    """Top-rated and most recently added active movies."""
    featured = (
        active_movies()
        .order_by(Movie.average_rating.desc(), Movie.total_reviews.desc(), Movie.id.asc())
        .limit(FEATURED_LIMIT)
        .all()
    )
    recent = active_movies().order_by(*SORT_ORDERS['newest']).limit(FEATURED_LIMIT).all()
    return {
        'featured': [movie.to_dict() for movie in featured],
        'recent': [movie.to_dict() for movie in recent],
    }


def create_movie(payload: MovieCreate) -> Movie:
    """Add a movie to the catalog. Its aggregate starts at zero."""
    fields = payload.changes()
    movie = Movie(average_rating=0.0, total_reviews=0, status=RecordStatus.ACTIVE, **fields)
    db.session.add(movie)
    commit_or_raise("create_movie")
    logger.info("movie_created", movie_id=movie.id, title=movie.title)
    return movie


def update_movie(movie_id: int, payload: MovieUpdate) -> Movie:
    """Apply a partial update. The aggregate and status are not writable here."""
    movie = get_active_movie(movie_id)
    changes = payload.changes()
    for field, value in changes.items():
        setattr(movie, field, value)
    commit_or_raise("update_movie")
    logger.info("movie_updated", movie_id=movie.id, fields=sorted(changes))
    return movie


def remove_movie(movie_id: int) -> Movie:
    """Soft-delete a movie."""
    movie = get_active_movie(movie_id)
    movie.status = RecordStatus.REMOVED
    commit_or_raise("remove_movie")
    logger.info("movie_removed", movie_id=movie.id)
    return movie
