"""
Request schemas for CineReview.

This module defines Pydantic models for validating request bodies and query
parameters. Field aliases carry the camelCase wire names used by clients;
attribute names follow the snake_case model columns.

A pydantic ValidationError raised by any of these models is reported to the
client as a per-field validation error (see cinereview.errors).
"""

import re
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_PAGE_SIZE = 50
MIN_RELEASE_YEAR = 1900

SORT_OPTIONS = ("newest", "rating", "year", "title")

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def _max_release_year() -> int:
    return datetime.now().year + 5


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _clean_string_list(value: Any) -> Any:
    if isinstance(value, list):
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]
    return value


class RequestSchema(BaseModel):
    """Base for request bodies: accepts wire aliases or attribute names, ignores unknown keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def changes(self) -> dict:
        """Non-null fields explicitly supplied by the client, keyed by attribute name."""
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


# --- Authentication ---------------------------------------------------------

class RegisterRequest(RequestSchema):
    username: str = Field(..., min_length=3, max_length=20)
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator('username', 'email', mode='before')
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        if not EMAIL_PATTERN.match(v):
            raise ValueError('A valid email address is required')
        return v.lower()


class LoginRequest(RequestSchema):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator('email', mode='before')
    @classmethod
    def normalize_email(cls, v):
        v = _strip(v)
        return v.lower() if isinstance(v, str) else v


# --- Movies -----------------------------------------------------------------

class MovieFields(RequestSchema):
    """Shared constraints of movie create/update bodies."""

    @field_validator('title', 'director', 'synopsis', 'poster_url', 'trailer_url', 'language',
                     mode='before', check_fields=False)
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @field_validator('genres', 'cast', mode='before', check_fields=False)
    @classmethod
    def clean_lists(cls, v):
        return _clean_string_list(v)

    @field_validator('release_year', check_fields=False)
    @classmethod
    def validate_release_year(cls, v):
        if v is not None and v > _max_release_year():
            raise ValueError(f'Release year cannot be later than {_max_release_year()}')
        return v


class MovieCreate(MovieFields):
    """
    Body of POST /movies.

    averageRating/totalReviews are not accepted: new movies always start at 0.
    """
    title: str = Field(..., min_length=1, max_length=255)
    genres: List[str] = Field(..., alias='genre', min_length=1)
    release_year: int = Field(..., alias='releaseYear', ge=MIN_RELEASE_YEAR)
    director: str = Field(..., min_length=1, max_length=255)
    cast: List[str] = Field(default_factory=list)
    synopsis: str = Field(..., min_length=1, max_length=2000)
    duration: int = Field(..., ge=1)
    poster_url: Optional[str] = Field(None, alias='posterUrl', max_length=512)
    trailer_url: Optional[str] = Field(None, alias='trailerUrl', max_length=512)
    language: Optional[str] = Field(None, max_length=64)

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "title": "Inception",
                "genre": ["Action", "Sci-Fi", "Thriller"],
                "releaseYear": 2010,
                "director": "Christopher Nolan",
                "cast": ["Leonardo DiCaprio", "Marion Cotillard"],
                "synopsis": "A thief who steals corporate secrets through dream-sharing technology...",
                "duration": 148,
            }
        }
    )


class MovieUpdate(MovieFields):
    """Body of PUT /movies/<id>; every field optional, aggregates not writable."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    genres: Optional[List[str]] = Field(None, alias='genre', min_length=1)
    release_year: Optional[int] = Field(None, alias='releaseYear', ge=MIN_RELEASE_YEAR)
    director: Optional[str] = Field(None, min_length=1, max_length=255)
    cast: Optional[List[str]] = None
    synopsis: Optional[str] = Field(None, min_length=1, max_length=2000)
    duration: Optional[int] = Field(None, ge=1)
    poster_url: Optional[str] = Field(None, alias='posterUrl', max_length=512)
    trailer_url: Optional[str] = Field(None, alias='trailerUrl', max_length=512)
    language: Optional[str] = Field(None, max_length=64)


# --- Reviews ----------------------------------------------------------------

class ReviewCreate(RequestSchema):
    rating: int = Field(..., ge=1, le=5)
    review_text: str = Field(..., alias='reviewText', min_length=10, max_length=1000)

    @field_validator('review_text', mode='before')
    @classmethod
    def strip_text(cls, v):
        return _strip(v)


class ReviewUpdate(RequestSchema):
    rating: Optional[int] = Field(None, ge=1, le=5)
    review_text: Optional[str] = Field(None, alias='reviewText', min_length=10, max_length=1000)

    @field_validator('review_text', mode='before')
    @classmethod
    def strip_text(cls, v):
        return _strip(v)


# --- Users ------------------------------------------------------------------

class ProfileUpdate(RequestSchema):
    """Body of PUT /users/profile. Only these fields are writable."""
    username: Optional[str] = Field(None, min_length=3, max_length=20)
    bio: Optional[str] = Field(None, max_length=500)
    profile_picture: Optional[str] = Field(None, alias='profilePicture', max_length=512)
    favorite_genres: Optional[List[str]] = Field(None, alias='favoriteGenres')

    @field_validator('username', 'bio', 'profile_picture', mode='before')
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @field_validator('favorite_genres', mode='before')
    @classmethod
    def clean_genres(cls, v):
        return _clean_string_list(v)


# --- Query parameters -------------------------------------------------------

class QuerySchema(BaseModel):
    """Base for query strings: blank values count as absent."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator('*', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class PageQuery(QuerySchema):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=MAX_PAGE_SIZE)

    @field_validator('page', 'limit', mode='before')
    @classmethod
    def default_when_blank(cls, v, info):
        if v is None or (isinstance(v, str) and not v.strip()):
            return cls.model_fields[info.field_name].default
        return v


class MovieListQuery(PageQuery):
    """Query string of GET /movies."""
    limit: int = Field(12, ge=1, le=MAX_PAGE_SIZE)
    search: Optional[str] = None
    genre: Optional[str] = None
    year: Optional[int] = Field(None, ge=MIN_RELEASE_YEAR)
    min_rating: Optional[float] = Field(None, alias='minRating', ge=0, le=5)
    sort_by: str = Field('newest', alias='sortBy')

    @field_validator('sort_by', mode='after')
    @classmethod
    def known_sort(cls, v):
        return v if v in SORT_OPTIONS else 'newest'

    @field_validator('sort_by', mode='before')
    @classmethod
    def default_sort(cls, v):
        return v if v else 'newest'
