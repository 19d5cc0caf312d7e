"""
Users Routes Blueprint

- /api/users: list users (optional ?role=) for project manager pickers
"""

import logging
from flask import Blueprint, request, jsonify

from database.connection import get_db_session
from services.users_repository import UsersRepository

logger = logging.getLogger(__name__)

# Create blueprint
users_bp = Blueprint('users_bp', __name__)


@users_bp.route('/api/users', methods=['GET'])
def list_users():
    with get_db_session() as session:
        users = UsersRepository(session).list_users(role=request.args.get('role'))
    return jsonify(users)
