#!/usr/bin/env python3
"""
Catalog seeding script.
Loads the sample movies into the configured database and optionally creates
an admin account. Movies already present (same title and release year) are
skipped, so the script can be re-run safely.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --admin-email admin@test.com --admin-password secret123
"""

import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cinereview.app import create_app
from cinereview.client.sample_data import SAMPLE_MOVIES
from cinereview.errors import ConflictError
from cinereview.logging_config import get_logger
from cinereview.logging_metrics import track_phase
from cinereview.models import db, Movie, User
from cinereview.schemas import MovieCreate, RegisterRequest
from cinereview.services.catalog import create_movie
from cinereview.services.users import register_user

logger = get_logger(__name__)


def seed_movies() -> int:
    """Insert missing sample movies. Returns the number inserted."""
    inserted = 0
    for sample in SAMPLE_MOVIES:
        payload = MovieCreate.model_validate(sample)
        exists = Movie.query.filter_by(title=payload.title, release_year=payload.release_year).first()
        if exists is not None:
            continue
        create_movie(payload)
        inserted += 1
    return inserted


def ensure_admin(username: str, email: str, password: str) -> User:
    """Create the admin account, or promote the existing one."""
    user = User.query.filter_by(email=email.lower()).first()
    if user is None:
        try:
            user, _ = register_user(RegisterRequest(username=username, email=email, password=password))
        except ConflictError as e:
            logger.error("admin_create_failed", error=e.message)
            raise
    if not user.is_admin:
        user.is_admin = True
        db.session.commit()
    return user


def main():
    parser = argparse.ArgumentParser(description="Seed the CineReview catalog")
    parser.add_argument("--admin-username", default="admin")
    parser.add_argument("--admin-email")
    parser.add_argument("--admin-password")
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        with track_phase("catalog_seed"):
            inserted = seed_movies()
            print(f"Inserted {inserted} movie(s), {len(SAMPLE_MOVIES) - inserted} already present.")

            if args.admin_email and args.admin_password:
                admin = ensure_admin(args.admin_username, args.admin_email, args.admin_password)
                print(f"Admin account ready: {admin.username} <{admin.email}>")


if __name__ == "__main__":
    main()
