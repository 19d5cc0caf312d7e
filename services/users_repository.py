"""
Users Repository - Read access to users for assignment pickers.
"""

import logging
from typing import List, Dict
from sqlalchemy.orm import Session

from database.models import User, UserRole
from services.store import get_or_raise, coerce_enum

logger = logging.getLogger(__name__)


class UsersRepository:
    """Repository for user database operations."""

    def __init__(self, session: Session):
        self.session = session

    def list_users(self, role: str = None) -> List[Dict]:
        """List users ordered by name, optionally filtered by role."""
        query = self.session.query(User)
        if role:
            query = query.filter(User.role == coerce_enum(UserRole, role))
        users = query.order_by(User.name).all()
        return [u.to_dict() for u in users]

    def get_user(self, user_id: str) -> Dict:
        """Get a user by ID."""
        return get_or_raise(self.session, User, user_id, 'User').to_dict()
