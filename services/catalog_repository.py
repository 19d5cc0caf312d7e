"""
Catalog Repository - Database access layer for the materials catalog tree.
"""

import logging
from typing import List, Dict
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import or_

from database.models import CatalogCategory, CatalogSubcategory, CatalogItem, Trade
from services.store import get_or_raise, flush_or_fail, coerce_enum
from validators import ValidationError

logger = logging.getLogger(__name__)

ENTRY_TYPES = ('category', 'subcategory', 'item')


class CatalogRepository:
    """Repository for catalog database operations."""

    def __init__(self, session: Session):
        self.session = session

    def list_catalog(self, trade: str = None, search: str = None) -> List[Dict]:
        """
        Category -> subcategory -> item tree.

        Categories and subcategories are ordered by sort order, items by name.
        A search only filters items (on name or description); empty
        subcategories are still returned so the tree shape stays stable.
        """
        query = self.session.query(CatalogCategory).options(
            selectinload(CatalogCategory.subcategories)
        )
        if trade:
            query = query.filter(CatalogCategory.trade == coerce_enum(Trade, trade))
        categories = query.order_by(CatalogCategory.sort_order, CatalogCategory.name).all()

        subcategory_ids = [sub.id for cat in categories for sub in cat.subcategories]
        items_by_subcategory = {sub_id: [] for sub_id in subcategory_ids}
        if subcategory_ids:
            item_query = self.session.query(CatalogItem).filter(
                CatalogItem.subcategory_id.in_(subcategory_ids)
            )
            if search:
                pattern = f"%{search}%"
                item_query = item_query.filter(or_(
                    CatalogItem.name.ilike(pattern),
                    CatalogItem.description.ilike(pattern),
                ))
            for item in item_query.order_by(CatalogItem.name).all():
                items_by_subcategory[item.subcategory_id].append(item.to_dict())

        return [
            category.to_dict(subcategories=[
                sub.to_dict(items=items_by_subcategory[sub.id])
                for sub in category.subcategories
            ])
            for category in categories
        ]

    def create_entry(self, data: Dict) -> Dict:
        """Create a category, subcategory or item depending on data['type']."""
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        entry_type = data.get('type')
        if entry_type not in ENTRY_TYPES:
            raise ValidationError("Invalid type", field='type')
        if not data.get('name'):
            raise ValidationError("Name is required", field='name')

        if entry_type == 'category':
            entry = CatalogCategory(
                name=data['name'],
                trade=coerce_enum(Trade, data.get('trade'), Trade.GENERAL),
                sort_order=data.get('sortOrder') or 0,
            )
        elif entry_type == 'subcategory':
            get_or_raise(self.session, CatalogCategory, data.get('categoryId'), 'Category')
            entry = CatalogSubcategory(
                name=data['name'],
                category_id=data['categoryId'],
                sort_order=data.get('sortOrder') or 0,
            )
        else:
            get_or_raise(self.session, CatalogSubcategory, data.get('subcategoryId'), 'Subcategory')
            entry = CatalogItem(
                name=data['name'],
                description=data.get('description'),
                default_unit=data.get('defaultUnit') or 'each',
                estimated_price=data.get('estimatedPrice'),
                subcategory_id=data['subcategoryId'],
            )

        self.session.add(entry)
        flush_or_fail(self.session, f'create catalog {entry_type}')
        logger.info(f"Created catalog {entry_type}: {entry.id}")
        return entry.to_dict()
