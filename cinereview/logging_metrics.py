"""
Phase tracking for structured logging.

Wraps multi-step operations (e.g. a rating recompute) so that their start,
completion or failure and duration land in the log stream.
"""

import time
from contextlib import contextmanager
from cinereview.logging_config import get_logger

logger = get_logger(__name__)


def log_phase(
    phase: str,
    status: str,
    **extra_context
):
    """
    Log major operation phase events.

    Args:
        phase: Phase name (e.g., "rating_recompute", "catalog_seed")
        status: Phase status ("started", "completed", "failed")
        **extra_context: Additional context to log
    """
    log_level = logger.error if status == "failed" else logger.info

    log_level(
        "operation_phase",
        phase=phase,
        status=status,
        **extra_context
    )


@contextmanager
def track_phase(phase: str, **extra_context):
    """
    Context manager to track an operation phase.

    Args:
        phase: Phase name
        **extra_context: Additional context to log

    Yields:
        None

    Example:
        with track_phase("rating_recompute", movie_id=42):
            recompute_movie_rating(42)
    """
    start_time = time.time()

    log_phase(phase, "started", **extra_context)

    error = None
    try:
        yield
    except Exception as e:
        error = e
        raise
    finally:
        duration_ms = (time.time() - start_time) * 1000
        status = "failed" if error else "completed"

        log_phase(
            phase,
            status,
            duration_ms=round(duration_ms, 2),
            error=str(error) if error else None,
            **extra_context
        )
