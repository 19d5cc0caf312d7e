"""
Catalog Routes Blueprint

- /api/catalog: GET the category -> subcategory -> item tree, POST a new entry
"""

import logging
from flask import Blueprint, request, jsonify

from database.connection import get_db_session
from services.catalog_repository import CatalogRepository
from app.utils.helpers import get_json_body

logger = logging.getLogger(__name__)

# Create blueprint
catalog_bp = Blueprint('catalog_bp', __name__)


@catalog_bp.route('/api/catalog', methods=['GET'])
def list_catalog():
    """Catalog tree; optional ?trade= and ?search= (item name/description)."""
    with get_db_session() as session:
        catalog = CatalogRepository(session).list_catalog(
            trade=request.args.get('trade'),
            search=request.args.get('search'),
        )
    return jsonify(catalog)


@catalog_bp.route('/api/catalog', methods=['POST'])
def create_catalog_entry():
    """Body carries type = category | subcategory | item plus that entry's fields."""
    data = get_json_body()
    with get_db_session() as session:
        entry = CatalogRepository(session).create_entry(data)
    return jsonify(entry), 201
