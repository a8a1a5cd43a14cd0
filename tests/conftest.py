import itertools
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from cinereview.app import create_app
from cinereview.auth import hash_password, issue_token
from cinereview.config import TestConfig
from cinereview.logging_context import clear_context
from cinereview.models import db, Movie, RecordStatus, User

DEFAULT_PASSWORD = 'password123'

_counter = itertools.count(1)


@pytest.fixture(autouse=True)
def clean_context():
    """Ensure no logging context leaks between tests."""
    clear_context()
    yield
    clear_context()


@pytest.fixture(scope='function')
def app():
    """Create a fresh app backed by an in-memory database for each test."""
    app = create_app(config_object=TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _detach(app, obj, *relationships):
    """Commit, load attributes and detach so tests can read `obj` outside a context."""
    db.session.add(obj)
    db.session.commit()
    db.session.refresh(obj)
    for name in relationships:
        getattr(obj, name)
    db.session.expunge(obj)
    return obj


@pytest.fixture
def make_user(app):
    """Factory creating users: make_user(username=..., is_admin=True, ...)."""
    def _make_user(username=None, email=None, password=DEFAULT_PASSWORD, **fields):
        n = next(_counter)
        username = username or f'user{n}'
        email = email or f'{username}@example.com'
        with app.app_context():
            user = User(
                username=username,
                email=email.lower(),
                password_hash=hash_password(password),
                **fields
            )
            return _detach(app, user)
    return _make_user


@pytest.fixture
def make_movie(app):
    """Factory creating active movies with zero aggregates unless overridden."""
    def _make_movie(title=None, genres=None, **fields):
        n = next(_counter)
        values = {
            'title': title or f'Movie {n}',
            'release_year': 2000,
            'director': 'Jane Director',
            'cast': ['Lead Actor'],
            'synopsis': 'A story worth telling on the big screen.',
            'duration': 120,
            'average_rating': 0.0,
            'total_reviews': 0,
            'status': RecordStatus.ACTIVE,
        }
        values.update(fields)
        with app.app_context():
            movie = Movie(**values)
            movie.genres = genres if genres is not None else ['Drama']
            return _detach(app, movie, 'genre_links')
    return _make_movie


@pytest.fixture
def auth_headers(app):
    """Build an Authorization header carrying a valid token for `user`."""
    def _auth_headers(user):
        with app.app_context():
            return {'Authorization': f'Bearer {issue_token(user)}'}
    return _auth_headers
