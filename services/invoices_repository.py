"""
Invoices Repository - Database access layer for job invoices and line items.
"""

import logging
from datetime import datetime
from typing import List, Dict, Optional
from sqlalchemy.orm import Session, selectinload

from database.models import Job, Invoice, InvoiceItem, InvoiceStatus, JobMaterial, User
from services.notification_service import NotificationService
from services.store import get_or_raise, flush_or_fail, parse_date, coerce_enum

logger = logging.getLogger(__name__)

# Fields a PATCH may change; file/raw text/AI payload are fixed at upload
UPDATABLE_FIELDS = {
    'vendorName': ('vendor_name', None),
    'invoiceNumber': ('invoice_number', None),
    'invoiceDate': ('invoice_date', parse_date),
    'totalAmount': ('total_amount', None),
    'taxAmount': ('tax_amount', None),
    'status': ('status', lambda v: coerce_enum(InvoiceStatus, v, InvoiceStatus.PENDING)),
    'notes': ('notes', None),
}


class InvoicesRepository:
    """Repository for invoice database operations."""

    def __init__(self, session: Session, notifications: Optional[NotificationService] = None):
        self.session = session
        self.notifications = notifications or NotificationService(session)

    def _ensure_job(self, job_id: str) -> Job:
        return get_or_raise(self.session, Job, job_id, 'Job')

    def _load(self, job_id: str, invoice_id: str) -> Invoice:
        return get_or_raise(self.session, Invoice, invoice_id, 'Invoice', job_id=job_id)

    def list_invoices(self, job_id: str) -> List[Dict]:
        """List a job's invoices with their items, newest first."""
        self._ensure_job(job_id)
        invoices = self.session.query(Invoice).options(
            selectinload(Invoice.items),
            selectinload(Invoice.uploaded_by),
        ).filter(
            Invoice.job_id == job_id
        ).order_by(Invoice.created_at.desc()).all()
        return [inv.to_dict() for inv in invoices]

    def _build_item(self, job_id: str, data: Dict) -> InvoiceItem:
        material_id = data.get('jobMaterialId') or None
        if material_id:
            # Items may only link to materials of the same job
            get_or_raise(self.session, JobMaterial, material_id, 'Material', job_id=job_id)
        return InvoiceItem(
            description=data.get('description'),
            quantity=data.get('quantity'),
            unit_price=data.get('unitPrice'),
            total_price=data.get('totalPrice'),
            job_material_id=material_id,
        )

    def create_invoice(self, job_id: str, data: Dict, uploaded_by_id: str = None) -> Dict:
        """Create an invoice (and nested items) and notify the job's project manager."""
        job = self._ensure_job(job_id)
        if uploaded_by_id:
            get_or_raise(self.session, User, uploaded_by_id, 'User')

        invoice = Invoice(
            job_id=job_id,
            uploaded_by_id=uploaded_by_id,
            vendor_name=data.get('vendorName'),
            invoice_number=data.get('invoiceNumber'),
            invoice_date=parse_date(data.get('invoiceDate')),
            total_amount=data.get('totalAmount'),
            tax_amount=data.get('taxAmount'),
            status=coerce_enum(InvoiceStatus, data.get('status'), InvoiceStatus.PENDING),
            file_url=data.get('fileUrl'),
            file_name=data.get('fileName'),
            raw_text=data.get('rawText'),
            ai_extracted=data.get('aiExtracted'),
            notes=data.get('notes'),
        )
        invoice.items = [self._build_item(job_id, item) for item in data.get('items') or []]
        self.session.add(invoice)
        flush_or_fail(self.session, 'create invoice')
        logger.info(f"Created invoice {invoice.id} for job {job.job_number}")

        if job.project_manager_id and job.project_manager_id != uploaded_by_id:
            vendor = invoice.vendor_name or 'Unknown vendor'
            amount = f" for ${invoice.total_amount:,.2f}" if invoice.total_amount is not None else ''
            self.notifications.create_notification(
                user_id=job.project_manager_id,
                job_id=job.id,
                notification_type='invoice',
                title=f"New invoice on {job.job_number}",
                message=f"{vendor} invoice{amount} was uploaded to {job.name}",
            )

        return invoice.to_dict()

    def update_invoice(self, job_id: str, invoice_id: str, data: Dict) -> Dict:
        invoice = self._load(job_id, invoice_id)
        for key, (attr, convert) in UPDATABLE_FIELDS.items():
            if key in data:
                value = data[key]
                setattr(invoice, attr, convert(value) if convert else value)
        invoice.updated_at = datetime.utcnow()
        flush_or_fail(self.session, 'update invoice')
        logger.info(f"Updated invoice: {invoice_id}")
        return invoice.to_dict()

    def delete_invoice(self, job_id: str, invoice_id: str) -> bool:
        invoice = self._load(job_id, invoice_id)
        self.session.delete(invoice)
        flush_or_fail(self.session, 'delete invoice')
        logger.info(f"Deleted invoice: {invoice_id}")
        return True

    def get_invoice(self, job_id: str, invoice_id: str) -> Dict:
        return self._load(job_id, invoice_id).to_dict()
