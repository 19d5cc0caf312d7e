"""
Notifications Routes Blueprint

- GET /api/notifications: the acting user's latest notifications and unread count
- PATCH /api/notifications: {"markAllRead": true} or {"id": "<notification id>"}
"""

import logging
from flask import Blueprint, request, jsonify

from database.connection import get_db_session
from services.notification_service import NotificationService
from app.utils.helpers import get_json_body, acting_user_id

logger = logging.getLogger(__name__)

# Create blueprint
notifications_bp = Blueprint('notifications_bp', __name__)


def _target_user_id():
    return request.args.get('userId') or acting_user_id()


@notifications_bp.route('/api/notifications', methods=['GET'])
def get_notifications():
    user_id = _target_user_id()
    if not user_id:
        return jsonify({'error': 'User not specified'}), 400

    with get_db_session() as session:
        service = NotificationService(session)
        notifications = service.get_notifications(user_id)
        unread_count = service.get_unread_count(user_id)

    return jsonify({
        'notifications': notifications,
        'unreadCount': unread_count,
    })


@notifications_bp.route('/api/notifications', methods=['PATCH'])
def update_notifications():
    data = get_json_body()
    if not isinstance(data, dict):
        return jsonify({'error': 'Invalid request'}), 400

    if data.get('markAllRead'):
        user_id = _target_user_id()
        if not user_id:
            return jsonify({'error': 'User not specified'}), 400
        with get_db_session() as session:
            NotificationService(session).mark_all_as_read(user_id)
        return jsonify({'success': True})

    if data.get('id'):
        with get_db_session() as session:
            NotificationService(session).mark_as_read(data['id'])
        return jsonify({'success': True})

    return jsonify({'error': 'Invalid request'}), 400
