"""
Service layer: the use cases behind the HTTP routes.

Services raise cinereview.errors exceptions and own their transaction: every
mutation ends in exactly one commit_or_raise call.
"""

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from cinereview.errors import StoreError
from cinereview.logging_config import get_logger
from cinereview.models import db

logger = get_logger(__name__)


def commit_or_raise(operation: str, conflict=None):
    """
    Commit the current session.

    Args:
        operation: Name of the use case, for logging
        conflict: Optional ServiceError raised instead of StoreError when the
            commit hits a uniqueness constraint

    Raises:
        StoreError: on any store failure; the session is rolled back first
    """
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        if conflict is not None:
            logger.info("commit_conflict", operation=operation)
            raise conflict from e
        logger.error("commit_failed", operation=operation, error=str(e.orig))
        raise StoreError(original_error=e) from e
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("commit_failed", operation=operation, error=str(e))
        raise StoreError(original_error=e) from e
