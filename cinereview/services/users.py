"""
Account, profile and watchlist use cases.

A watchlist behaves as a set: adding a movie that is already present is a
409 conflict, removing one that is absent is a no-op. Entries are listed in
the order they were added.
"""

from typing import Any, Dict, List, Tuple

from sqlalchemy import func

from cinereview.auth import hash_password, issue_token, verify_password
from cinereview.errors import AuthenticationError, ConflictError
from cinereview.logging_config import get_logger
from cinereview.logging_context import bind_context
from cinereview.metrics import track_auth_failure, track_watchlist_operation
from cinereview.models import db, Movie, RecordStatus, Review, User, WatchlistEntry
from cinereview.schemas import LoginRequest, ProfileUpdate, RegisterRequest
from cinereview.services import commit_or_raise
from cinereview.services.catalog import get_active_movie

logger = get_logger(__name__)


def _username_taken() -> ConflictError:
    return ConflictError('Username already taken', 'username_taken')


def register_user(payload: RegisterRequest) -> Tuple[User, str]:
    """
    Create an account and sign a token for it.

    Raises:
        ConflictError: code "username_taken" or "email_taken"
    """
    if User.query.filter_by(email=payload.email).first() is not None:
        raise ConflictError('Email already registered', 'email_taken')
    if User.query.filter_by(username=payload.username).first() is not None:
        raise _username_taken()

    user = User(
        username=payload.username,
        email=payload.email,
        password_hash=hash_password(payload.password),
    )
    db.session.add(user)
    commit_or_raise(
        "register_user",
        conflict=ConflictError('User with this email or username already exists', 'user_exists'),
    )

    logger.info("user_registered", user_id=user.id)
    return user, issue_token(user)


def authenticate(payload: LoginRequest) -> Tuple[User, str]:
    """
    Check credentials and sign a token.

    Unknown email, wrong password and inactive account all produce the same
    error so callers cannot probe which accounts exist.
    """
    user = User.query.filter_by(email=payload.email).first()
    if user is None or not user.is_active or not verify_password(user.password_hash, payload.password):
        track_auth_failure('invalid_credentials')
        logger.info("login_rejected")
        raise AuthenticationError('Invalid credentials', 'invalid_credentials')

    logger.info("user_logged_in", user_id=user.id)
    return user, issue_token(user)


def _active_watchlist_entries(user: User) -> List[WatchlistEntry]:
    return (
        WatchlistEntry.query
        .join(Movie, WatchlistEntry.movie_id == Movie.id)
        .filter(WatchlistEntry.user_id == user.id, Movie.status == RecordStatus.ACTIVE)
        .order_by(WatchlistEntry.added_at.asc(), WatchlistEntry.id.asc())
        .all()
    )


def get_profile(user: User) -> Dict[str, Any]:
    """Profile fields plus watchlist summaries and the number of active reviews."""
    review_count = db.session.query(func.count(Review.id)).filter(
        Review.user_id == user.id,
        Review.status == RecordStatus.ACTIVE,
    ).scalar()

    data = user.to_dict()
    data['watchlist'] = [entry.to_dict() for entry in _active_watchlist_entries(user)]
    data['reviewCount'] = int(review_count or 0)
    return data


def update_profile(user: User, payload: ProfileUpdate) -> User:
    """
    Apply profile changes.

    Raises:
        ConflictError: if the new username belongs to another account
    """
    changes = payload.changes()

    new_username = changes.get('username')
    if new_username and new_username != user.username:
        clash = User.query.filter(User.username == new_username, User.id != user.id).first()
        if clash is not None:
            raise _username_taken()

    for field, value in changes.items():
        setattr(user, field, value)
    commit_or_raise("update_profile", conflict=_username_taken())

    logger.info("profile_updated", fields=sorted(changes))
    return user


def list_watchlist(user: User) -> List[Dict[str, Any]]:
    return [entry.to_dict() for entry in _active_watchlist_entries(user)]


def add_to_watchlist(user: User, movie_id: int) -> List[Dict[str, Any]]:
    """
    Add an active movie to the user's watchlist.

    Raises:
        NotFoundError: if the movie is missing or removed
        ConflictError: code "already_in_watchlist"
    """
    bind_context(movie_id=movie_id)
    movie = get_active_movie(movie_id)

    duplicate = ConflictError('Movie already in watchlist', 'already_in_watchlist')
    exists = WatchlistEntry.query.filter_by(user_id=user.id, movie_id=movie.id).first()
    if exists is not None:
        track_watchlist_operation('add', 'duplicate')
        logger.info("watchlist_add_rejected", reason="already_in_watchlist")
        raise duplicate

    db.session.add(WatchlistEntry(user_id=user.id, movie_id=movie.id))
    commit_or_raise("add_to_watchlist", conflict=duplicate)

    track_watchlist_operation('add', 'added')
    logger.info("watchlist_movie_added")
    return list_watchlist(user)


def remove_from_watchlist(user: User, movie_id: int) -> List[Dict[str, Any]]:
    """Remove a movie from the watchlist; absent movies are ignored."""
    bind_context(movie_id=movie_id)
    entry = WatchlistEntry.query.filter_by(user_id=user.id, movie_id=movie_id).first()
    if entry is None:
        track_watchlist_operation('remove', 'absent')
        logger.debug("watchlist_remove_noop")
        return list_watchlist(user)

    db.session.delete(entry)
    commit_or_raise("remove_from_watchlist")

    track_watchlist_operation('remove', 'removed')
    logger.info("watchlist_movie_removed")
    return list_watchlist(user)
