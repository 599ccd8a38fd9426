"""
Shared helpers for the CRUD layer.

Read failures in the store degrade to "no data": the error is logged, the
transaction rolled back, and the caller sees an empty result.

Writes commit on their own by default. Multi-write steps pass commit=False
and wrap the writes in `atomic` so the step lands or fails as a whole.
"""

import functools
import logging
from contextlib import contextmanager
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


def degrade_on_error(default=None):
    """Decorate a read function taking `db` first so storage errors return `default`."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(db, *args, **kwargs):
            try:
                return func(db, *args, **kwargs)
            except SQLAlchemyError as e:
                logger.error(f"Store read failed in {func.__name__}: {e}")
                db.rollback()
                return default

        return wrapper

    return decorator


def persist(db, commit: bool = True) -> None:
    """Commit, or only flush when the caller owns the transaction."""
    if commit:
        db.commit()
    else:
        db.flush()


@contextmanager
def atomic(db):
    """
    Run several writes as one transaction.

    Writes inside the block should pass commit=False; the block commits once
    on success and rolls everything back if anything raises.
    """
    try:
        yield
        db.commit()
    except Exception:
        db.rollback()
        raise
