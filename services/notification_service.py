"""
Notification Service - Manages per-user in-app notifications.

This service handles:
- Creating notifications for a user, optionally tied to a job
- Listing a user's most recent notifications and unread count
- Marking one or all notifications as read
"""

import logging
from typing import Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from database.models import Notification
from services.store import get_or_raise, flush_or_fail

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50


class NotificationService:
    """Service for managing notifications."""

    def __init__(self, session: Session):
        self.session = session

    def create_notification(self, user_id: str, title: str, message: str = None,
                            notification_type: str = 'info',
                            job_id: Optional[str] = None) -> Dict:
        """
        Create a new notification.

        Args:
            user_id: User to notify
            title: Notification title
            message: Notification message
            notification_type: Type (info, invoice, material, budget)
            job_id: Related job, if any

        Returns:
            Created notification dict
        """
        notification = Notification(
            user_id=user_id,
            job_id=job_id,
            title=title,
            message=message,
            notification_type=notification_type,
            read=False,
        )
        self.session.add(notification)
        flush_or_fail(self.session, 'create notification')
        logger.info(f"Created notification for user {user_id}: {title}")
        return notification.to_dict()

    def get_notifications(self, user_id: str, limit: int = DEFAULT_LIMIT) -> List[Dict]:
        """Most recent notifications for a user, newest first."""
        notifications = self.session.query(Notification).options(
            selectinload(Notification.job)
        ).filter(
            Notification.user_id == user_id
        ).order_by(
            Notification.created_at.desc()
        ).limit(limit).all()
        return [n.to_dict() for n in notifications]

    def get_unread_count(self, user_id: str) -> int:
        """Get count of unread notifications."""
        return self.session.query(func.count(Notification.id)).filter(
            Notification.user_id == user_id,
            Notification.read.is_(False),
        ).scalar() or 0

    def mark_as_read(self, notification_id: str) -> Dict:
        """Mark a notification as read."""
        notification = get_or_raise(self.session, Notification, notification_id, 'Notification')
        notification.read = True
        flush_or_fail(self.session, 'mark notification read')
        return notification.to_dict()

    def mark_all_as_read(self, user_id: str) -> int:
        """Mark all of a user's unread notifications as read; returns how many changed."""
        count = self.session.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.read.is_(False),
        ).update({Notification.read: True}, synchronize_session='fetch')
        flush_or_fail(self.session, 'mark notifications read')
        logger.info(f"Marked {count} notifications read for user {user_id}")
        return count
