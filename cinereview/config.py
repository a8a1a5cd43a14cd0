"""
Application configuration for CineReview.

Values come from environment variables (optionally loaded from a `.env` file
in the project root). Use with `app.config.from_object(Config)`.
"""

import os
from dotenv import load_dotenv

# Project root (parent of the cinereview package)
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

load_dotenv(os.path.join(BASE_DIR, ".env"))


def _database_url() -> str:
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return database_url
    if os.getenv("GAE_ENV", "").startswith("standard") or os.getenv("CLOUD_RUN_SERVICE"):
        # Read-only filesystem on GCP apart from /tmp
        return "sqlite:////tmp/cinereview.db"
    return "sqlite:///" + os.path.join(BASE_DIR, "cinereview.db")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")

    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer tokens
    TOKEN_MAX_AGE_SECONDS = int(os.getenv("TOKEN_MAX_AGE_SECONDS", str(7 * 24 * 3600)))
    TOKEN_SALT = os.getenv("TOKEN_SALT", "cinereview-auth")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
