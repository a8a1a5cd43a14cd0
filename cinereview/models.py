"""
Database models for CineReview.

This module defines SQLAlchemy models for the three persisted collections
plus the watchlist link table:
- User: identity, credentials, role flag, profile fields
- Movie: catalog entry with the denormalized rating aggregate
- MovieGenre: one genre of a movie (indexed for genre filters)
- Review: one rating/review per (user, movie) pair
- WatchlistEntry: membership of a movie in a user's watchlist

Movie.average_rating and Movie.total_reviews are written only by
cinereview.aggregation.
"""

import enum
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

DEFAULT_POSTER_URL = 'https://via.placeholder.com/300x450?text=No+Poster'


def utcnow() -> datetime:
    """Naive UTC timestamp (SQLite stores datetimes without tzinfo)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _isoformat(value):
    return value.isoformat() if value else None


class RecordStatus(enum.Enum):
    """Lifecycle state of soft-deletable records."""
    ACTIVE = "active"
    REMOVED = "removed"


def _status_column():
    return db.Column(
        db.Enum(RecordStatus, name='record_status', values_callable=lambda e: [m.value for m in e]),
        default=RecordStatus.ACTIVE,
        nullable=False,
        index=True,
    )


class User(db.Model):
    """A registered account. Accounts are deactivated, never deleted."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(20), unique=True, nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Profile
    bio = db.Column(db.String(500), nullable=True, default='')
    profile_picture = db.Column(db.String(512), nullable=True, default='')
    favorite_genres = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    watchlist_entries = db.relationship(
        'WatchlistEntry',
        back_populates='user',
        order_by='WatchlistEntry.added_at, WatchlistEntry.id',
        cascade='all, delete-orphan',
    )

    def summary(self):
        """Public reviewer card embedded in review payloads."""
        return {
            '_id': self.id,
            'id': self.id,
            'username': self.username,
            'profilePicture': self.profile_picture or '',
        }

    def to_dict(self):
        """Convert the user to a dictionary. Never includes the password hash."""
        return {
            '_id': self.id,
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'isAdmin': self.is_admin,
            'bio': self.bio or '',
            'profilePicture': self.profile_picture or '',
            'favoriteGenres': list(self.favorite_genres or []),
            'createdAt': _isoformat(self.created_at),
            'updatedAt': _isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<User {self.username}>'


class Movie(db.Model):
    """Catalog entry. Removed movies stay in the table with status=removed."""
    __tablename__ = 'movies'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    release_year = db.Column(db.Integer, nullable=False, index=True)
    director = db.Column(db.String(255), nullable=False)
    cast = db.Column(db.JSON, nullable=False, default=list)
    synopsis = db.Column(db.String(2000), nullable=False)
    poster_url = db.Column(db.String(512), nullable=False, default=DEFAULT_POSTER_URL)
    trailer_url = db.Column(db.String(512), nullable=False, default='')
    duration = db.Column(db.Integer, nullable=False)
    language = db.Column(db.String(64), nullable=False, default='English')

    # Derived aggregate, owned by cinereview.aggregation
    average_rating = db.Column(db.Float, nullable=False, default=0.0, index=True)
    total_reviews = db.Column(db.Integer, nullable=False, default=0)

    status = _status_column()

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    reviews = db.relationship('Review', back_populates='movie', lazy='dynamic')
    genre_links = db.relationship(
        'MovieGenre',
        order_by='MovieGenre.position',
        cascade='all, delete-orphan',
    )

    @property
    def genres(self):
        return [link.name for link in self.genre_links]

    @genres.setter
    def genres(self, names):
        # Reuse surviving rows so the (movie_id, name) constraint holds within a flush
        existing = {link.name: link for link in self.genre_links}
        links = []
        for position, name in enumerate(dict.fromkeys(names or [])):
            link = existing.get(name) or MovieGenre(name=name)
            link.position = position
            links.append(link)
        self.genre_links = links

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE

    def summary(self):
        """Short movie card embedded in watchlist and review payloads."""
        return {
            '_id': self.id,
            'id': self.id,
            'title': self.title,
            'posterUrl': self.poster_url,
            'releaseYear': self.release_year,
            'averageRating': self.average_rating,
            'genre': list(self.genres or []),
            'director': self.director,
        }

    def to_dict(self):
        """Convert the movie to a dictionary for JSON serialization."""
        return {
            '_id': self.id,
            'id': self.id,
            'title': self.title,
            'genre': list(self.genres or []),
            'releaseYear': self.release_year,
            'director': self.director,
            'cast': list(self.cast or []),
            'synopsis': self.synopsis,
            'posterUrl': self.poster_url,
            'trailerUrl': self.trailer_url,
            'duration': self.duration,
            'language': self.language,
            'averageRating': self.average_rating,
            'totalReviews': self.total_reviews,
            'status': self.status.value if self.status else None,
            'createdAt': _isoformat(self.created_at),
            'updatedAt': _isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<Movie {self.title} ({self.release_year})>'


class MovieGenre(db.Model):
    """One genre of a movie; a table of its own so genre filters hit an index."""
    __tablename__ = 'movie_genres'

    id = db.Column(db.Integer, primary_key=True)
    movie_id = db.Column(db.Integer, db.ForeignKey('movies.id'), nullable=False, index=True)
    name = db.Column(db.String(64), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.UniqueConstraint('movie_id', 'name', name='uq_movie_genre'),
    )

    def __repr__(self):
        return f'<MovieGenre {self.name}>'


class Review(db.Model):
    """
    A user's rating and review of a movie.

    helpful_votes and report_count are reserved; no operation mutates them.
    """
    __tablename__ = 'reviews'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    movie_id = db.Column(db.Integer, db.ForeignKey('movies.id'), nullable=False, index=True)
    rating = db.Column(db.Integer, nullable=False)
    review_text = db.Column(db.String(1000), nullable=False)

    is_edited = db.Column(db.Boolean, default=False, nullable=False)
    edited_at = db.Column(db.DateTime, nullable=True)

    helpful_votes = db.Column(db.Integer, default=0, nullable=False)
    report_count = db.Column(db.Integer, default=0, nullable=False)

    status = _status_column()

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = db.relationship('User')
    movie = db.relationship('Movie', back_populates='reviews')

    # One review per user per movie, removed reviews included
    __table_args__ = (
        db.UniqueConstraint('user_id', 'movie_id', name='uq_review_user_movie'),
    )

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE

    def to_dict(self, include_movie: bool = False):
        """
        Convert the review to a dictionary for JSON serialization.

        Args:
            include_movie: Embed the movie summary instead of the bare movie ID
        """
        data = {
            '_id': self.id,
            'id': self.id,
            'userId': self.user.summary() if self.user else self.user_id,
            'movieId': self.movie.summary() if include_movie and self.movie else self.movie_id,
            'rating': self.rating,
            'reviewText': self.review_text,
            'isEdited': self.is_edited,
            'editedAt': _isoformat(self.edited_at),
            'helpfulVotes': self.helpful_votes,
            'reportCount': self.report_count,
            'status': self.status.value if self.status else None,
            'createdAt': _isoformat(self.created_at),
            'updatedAt': _isoformat(self.updated_at),
        }
        return data

    def __repr__(self):
        return f'<Review user={self.user_id} movie={self.movie_id} rating={self.rating}>'


class WatchlistEntry(db.Model):
    """Membership of a movie in a user's watchlist."""
    __tablename__ = 'watchlist_entries'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    movie_id = db.Column(db.Integer, db.ForeignKey('movies.id'), nullable=False)
    added_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    user = db.relationship('User', back_populates='watchlist_entries')
    movie = db.relationship('Movie')

    __table_args__ = (
        db.UniqueConstraint('user_id', 'movie_id', name='uq_watchlist_user_movie'),
    )

    def to_dict(self):
        data = self.movie.summary()
        data['addedAt'] = _isoformat(self.added_at)
        return data

    def __repr__(self):
        return f'<WatchlistEntry user={self.user_id} movie={self.movie_id}>'
