"""
Shared session helpers for the repositories.
"""

import logging
from datetime import date, datetime

from sqlalchemy.exc import SQLAlchemyError

from services.exceptions import NotFound, StoreFailure
from validators import ValidationError

logger = logging.getLogger(__name__)


def get_or_raise(session, model, entity_id, entity_name=None, **filters):
    """Load a row by primary key (plus optional filters) or raise NotFound."""
    query = session.query(model).filter(model.id == entity_id)
    for column, value in filters.items():
        query = query.filter(getattr(model, column) == value)
    row = query.first()
    if row is None:
        raise NotFound(entity_name or model.__name__, entity_id)
    return row


def flush_or_fail(session, action: str):
    """
    Flush pending changes, turning driver errors into StoreFailure.

    The session is rolled back first so a failed batch leaves nothing behind.
    """
    try:
        session.flush()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Store failure while trying to {action}: {e}")
        raise StoreFailure(f"Failed to {action}", original=e)


def parse_date(value):
    """Accept ISO date strings, dates or datetimes; blank means None."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"Invalid date: {value}")


def coerce_enum(enum_cls, value, default=None):
    """Enum member from a member or its name; None falls back to the default."""
    if value is None or value == '':
        return default
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls[str(value).upper()]
    except KeyError:
        raise ValidationError(f"Invalid {enum_cls.__name__}: {value}")
