"""
Materials Repository - Database access layer for job materials and imports.
"""

import logging
from datetime import datetime
from typing import List, Dict, Union
from sqlalchemy.orm import Session, selectinload

from database.models import Job, JobMaterial, MaterialStatus, Trade, CatalogItem, CatalogSubcategory, InvoiceItem
from services.material_import import normalize_import
from services.store import get_or_raise, flush_or_fail, coerce_enum

logger = logging.getLogger(__name__)

# request key -> model attribute
MATERIAL_FIELDS = {
    'catalogItemId': 'catalog_item_id',
    'customName': 'custom_name',
    'description': 'description',
    'unit': 'unit',
    'quantityNeeded': 'quantity_needed',
    'quantityOrdered': 'quantity_ordered',
    'quantityOnSite': 'quantity_on_site',
    'unitCost': 'unit_cost',
    'status': 'status',
    'vendor': 'vendor',
    'notes': 'notes',
    'trade': 'trade',
}

QUANTITY_FIELDS = ('quantity_needed', 'quantity_ordered', 'quantity_on_site')


def _convert(attr: str, value):
    if attr == 'status':
        return coerce_enum(MaterialStatus, value, MaterialStatus.NEEDED)
    if attr == 'trade':
        return coerce_enum(Trade, value, Trade.GENERAL)
    if attr == 'unit':
        return value or 'each'
    if attr in QUANTITY_FIELDS:
        return value or 0
    return value


class MaterialsRepository:
    """Repository for job material database operations."""

    def __init__(self, session: Session):
        self.session = session

    def _ensure_job(self, job_id: str) -> Job:
        return get_or_raise(self.session, Job, job_id, 'Job')

    def _load(self, job_id: str, material_id: str) -> JobMaterial:
        return get_or_raise(self.session, JobMaterial, material_id, 'Material', job_id=job_id)

    def list_materials(self, job_id: str, status: str = None, trade: str = None) -> List[Dict]:
        """List a job's materials, newest first, optionally by status/trade."""
        self._ensure_job(job_id)
        query = self.session.query(JobMaterial).options(
            selectinload(JobMaterial.catalog_item),
            selectinload(JobMaterial.invoice_items).selectinload(InvoiceItem.invoice),
        ).filter(JobMaterial.job_id == job_id)
        if status:
            query = query.filter(JobMaterial.status == coerce_enum(MaterialStatus, status))
        if trade:
            query = query.filter(JobMaterial.trade == coerce_enum(Trade, trade))
        materials = query.order_by(JobMaterial.created_at.desc()).all()

        results = []
        for material in materials:
            data = material.to_dict()
            data['invoiceItems'] = [
                dict(item.to_dict(), invoice={
                    'vendorName': item.invoice.vendor_name,
                    'invoiceDate': item.invoice.invoice_date.isoformat() if item.invoice.invoice_date else None,
                })
                for item in material.invoice_items
            ]
            results.append(data)
        return results

    def materials_report(self, job_id: str) -> List[Dict]:
        """A job's materials grouped for the report page: by trade, then status."""
        self._ensure_job(job_id)
        materials = self.session.query(JobMaterial).options(
            selectinload(JobMaterial.catalog_item)
        ).filter(
            JobMaterial.job_id == job_id
        ).order_by(JobMaterial.trade, JobMaterial.status, JobMaterial.created_at).all()
        return [m.to_dict() for m in materials]

    def _apply_catalog_defaults(self, material: JobMaterial, provided: Dict):
        """Catalog unit, price and trade fill in whatever the caller left out."""
        item = self.session.query(CatalogItem).options(
            selectinload(CatalogItem.subcategory).selectinload(CatalogSubcategory.category)
        ).filter(CatalogItem.id == material.catalog_item_id).first()
        if item is None:
            return
        if not provided.get('unit'):
            material.unit = item.default_unit
        if provided.get('unitCost') is None:
            material.unit_cost = item.estimated_price
        if not provided.get('trade'):
            material.trade = item.subcategory.category.trade

    def _build(self, job_id: str, data: Dict) -> JobMaterial:
        material = JobMaterial(job_id=job_id)
        for key, attr in MATERIAL_FIELDS.items():
            setattr(material, attr, _convert(attr, data.get(key)))
        if material.catalog_item_id:
            self._apply_catalog_defaults(material, data)
        return material

    def create_materials(self, job_id: str, items: Union[Dict, List[Dict]]) -> List[Dict]:
        """Create one or many materials in a single transaction."""
        self._ensure_job(job_id)
        items = items if isinstance(items, list) else [items]
        materials = [self._build(job_id, item) for item in items]
        self.session.add_all(materials)
        flush_or_fail(self.session, 'add materials')
        logger.info(f"Created {len(materials)} materials for job {job_id}")
        return [m.to_dict() for m in materials]

    def update_material(self, job_id: str, material_id: str, data: Dict) -> Dict:
        material = self._load(job_id, material_id)
        for key, attr in MATERIAL_FIELDS.items():
            if key in data:
                setattr(material, attr, _convert(attr, data[key]))
        material.updated_at = datetime.utcnow()
        flush_or_fail(self.session, 'update material')
        logger.info(f"Updated material: {material_id}")
        return material.to_dict()

    def delete_material(self, job_id: str, material_id: str) -> bool:
        material = self._load(job_id, material_id)
        self.session.delete(material)
        flush_or_fail(self.session, 'delete material')
        logger.info(f"Deleted material: {material_id}")
        return True

    def import_materials(self, job_id: str, content: bytes, filename: str) -> Dict:
        """
        Normalise an uploaded file and create every material in one batch.

        Raises:
            NotFound: unknown job
            EmptyImport: nothing to import; the store is not touched
            StoreFailure: the batch was rejected; no rows are kept
        """
        records = normalize_import(content, filename)
        self._ensure_job(job_id)

        materials = [
            JobMaterial(
                job_id=job_id,
                custom_name=record['custom_name'],
                description=record.get('description'),
                unit=record.get('unit') or 'each',
                quantity_needed=record.get('quantity_needed') or 0,
                unit_cost=record.get('unit_cost'),
                trade=coerce_enum(Trade, record.get('trade'), Trade.GENERAL),
                vendor=record.get('vendor'),
                status=MaterialStatus.NEEDED,
            )
            for record in records
        ]
        self.session.add_all(materials)
        flush_or_fail(self.session, 'import materials')
        logger.info(f"Imported {len(materials)} materials into job {job_id} from {filename}")
        return {
            'imported': len(materials),
            'materials': [m.to_dict() for m in materials],
        }
