"""
SQLAlchemy models for the KenyonCore job tracker.
Defines jobs, materials, invoices, the materials catalog, users and notifications.
"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import (
    Column, String, Text, Integer, Float, Boolean, DateTime, Date,
    ForeignKey, JSON, Enum as SQLEnum, Index, UniqueConstraint
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from database.connection import Base


def generate_uuid():
    """Generate a new UUID."""
    return str(uuid.uuid4())


def _iso(value):
    return value.isoformat() if value else None


# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), 'postgresql')


# =============================================================================
# ENUMERATIONS
# =============================================================================

class UserRole(str, enum.Enum):
    ADMIN = 'ADMIN'
    PROJECT_MANAGER = 'PROJECT_MANAGER'
    FIELD_CREW = 'FIELD_CREW'


class JobStatus(str, enum.Enum):
    PLANNING = 'PLANNING'
    IN_PROGRESS = 'IN_PROGRESS'
    ON_HOLD = 'ON_HOLD'
    COMPLETED = 'COMPLETED'
    CANCELLED = 'CANCELLED'


class Trade(str, enum.Enum):
    GENERAL = 'GENERAL'
    PLUMBING = 'PLUMBING'
    ELECTRICAL = 'ELECTRICAL'
    HVAC = 'HVAC'
    CARPENTRY = 'CARPENTRY'
    PAINTING = 'PAINTING'
    ROOFING = 'ROOFING'
    FLOORING = 'FLOORING'
    CONCRETE = 'CONCRETE'
    LANDSCAPING = 'LANDSCAPING'


class MaterialStatus(str, enum.Enum):
    NEEDED = 'NEEDED'
    ORDERED = 'ORDERED'
    DELIVERED = 'DELIVERED'
    INSTALLED = 'INSTALLED'
    RETURNED = 'RETURNED'


class InvoiceStatus(str, enum.Enum):
    PENDING = 'PENDING'
    APPROVED = 'APPROVED'
    DISPUTED = 'DISPUTED'
    PAID = 'PAID'


TradeType = SQLEnum(Trade, name='trade')


def enum_value(value):
    """Plain string for an enum member (or pass through an existing string)."""
    return value.value if isinstance(value, enum.Enum) else value


# =============================================================================
# USERS
# =============================================================================

class User(Base):
    """Application users. Authentication lives outside this service."""
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    role = Column(SQLEnum(UserRole, name='user_role'), nullable=False, default=UserRole.FIELD_CREW)
    phone = Column(String(50))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    managed_jobs = relationship("Job", back_populates="project_manager")

    __table_args__ = (
        Index('ix_users_role', 'role'),
    )

    def to_summary(self):
        return {'id': self.id, 'name': self.name, 'email': self.email}

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': enum_value(self.role),
            'phone': self.phone,
            'createdAt': _iso(self.created_at),
        }


# =============================================================================
# JOBS
# =============================================================================

class Job(Base):
    """A construction job with a budget, materials and invoices."""
    __tablename__ = 'jobs'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    job_number = Column(String(50), unique=True, nullable=False)
    address = Column(Text)
    client_name = Column(String(255))
    description = Column(Text)
    status = Column(SQLEnum(JobStatus, name='job_status'), nullable=False, default=JobStatus.PLANNING)
    start_date = Column(Date)
    end_date = Column(Date)
    budget_total = Column(Float, nullable=False, default=0)
    project_manager_id = Column(String(36), ForeignKey('users.id', ondelete='SET NULL'))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    project_manager = relationship("User", back_populates="managed_jobs")
    materials = relationship("JobMaterial", back_populates="job",
                             cascade="all, delete-orphan", passive_deletes=True,
                             order_by="JobMaterial.created_at.desc()")
    invoices = relationship("Invoice", back_populates="job",
                            cascade="all, delete-orphan", passive_deletes=True,
                            order_by="Invoice.created_at.desc()")
    notifications = relationship("Notification", back_populates="job",
                                 cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index('ix_jobs_status', 'status'),
        Index('ix_jobs_project_manager', 'project_manager_id'),
        Index('ix_jobs_updated_at', 'updated_at'),
    )

    def to_dict(self, include_children=False):
        data = {
            'id': self.id,
            'name': self.name,
            'jobNumber': self.job_number,
            'address': self.address,
            'clientName': self.client_name,
            'description': self.description,
            'status': enum_value(self.status),
            'startDate': _iso(self.start_date),
            'endDate': _iso(self.end_date),
            'budgetTotal': self.budget_total,
            'projectManagerId': self.project_manager_id,
            'projectManager': self.project_manager.to_summary() if self.project_manager else None,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
            '_count': {
                'materials': len(self.materials),
                'invoices': len(self.invoices),
            },
        }
        if include_children:
            data['materials'] = [m.to_dict() for m in self.materials]
            data['invoices'] = [i.to_dict() for i in self.invoices]
            data['_count']['notifications'] = len(self.notifications)
        return data


# =============================================================================
# CATALOG
# =============================================================================

class CatalogCategory(Base):
    """Top level of the catalog tree, unique per (name, trade)."""
    __tablename__ = 'catalog_categories'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    trade = Column(TradeType, nullable=False)
    sort_order = Column(Integer, default=0)

    subcategories = relationship("CatalogSubcategory", back_populates="category",
                                 cascade="all, delete-orphan",
                                 order_by="CatalogSubcategory.sort_order")

    __table_args__ = (
        UniqueConstraint('name', 'trade', name='uq_catalog_categories_name_trade'),
    )

    def to_dict(self, subcategories=None):
        data = {
            'id': self.id,
            'name': self.name,
            'trade': enum_value(self.trade),
            'sortOrder': self.sort_order,
        }
        if subcategories is not None:
            data['subcategories'] = subcategories
        return data


class CatalogSubcategory(Base):
    __tablename__ = 'catalog_subcategories'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    category_id = Column(String(36), ForeignKey('catalog_categories.id', ondelete='CASCADE'), nullable=False)
    sort_order = Column(Integer, default=0)

    category = relationship("CatalogCategory", back_populates="subcategories")
    items = relationship("CatalogItem", back_populates="subcategory",
                         cascade="all, delete-orphan", order_by="CatalogItem.name")

    __table_args__ = (
        UniqueConstraint('name', 'category_id', name='uq_catalog_subcategories_name_category'),
    )

    def to_dict(self, items=None):
        data = {
            'id': self.id,
            'name': self.name,
            'categoryId': self.category_id,
            'sortOrder': self.sort_order,
        }
        if items is not None:
            data['items'] = items
        return data


class CatalogItem(Base):
    """Catalog entry; default unit and price seed new job materials."""
    __tablename__ = 'catalog_items'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    default_unit = Column(String(50), nullable=False, default='each')
    estimated_price = Column(Float)
    subcategory_id = Column(String(36), ForeignKey('catalog_subcategories.id', ondelete='CASCADE'), nullable=False)

    subcategory = relationship("CatalogSubcategory", back_populates="items")

    __table_args__ = (
        UniqueConstraint('name', 'subcategory_id', name='uq_catalog_items_name_subcategory'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'defaultUnit': self.default_unit,
            'estimatedPrice': self.estimated_price,
            'subcategoryId': self.subcategory_id,
        }


# =============================================================================
# JOB MATERIALS
# =============================================================================

class JobMaterial(Base):
    """A material tracked against a job, from the catalog or custom-named."""
    __tablename__ = 'job_materials'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    job_id = Column(String(36), ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False)
    catalog_item_id = Column(String(36), ForeignKey('catalog_items.id', ondelete='SET NULL'))
    custom_name = Column(String(255))
    description = Column(Text)
    trade = Column(TradeType, nullable=False, default=Trade.GENERAL)
    unit = Column(String(50), nullable=False, default='each')
    quantity_needed = Column(Float, nullable=False, default=0)
    quantity_ordered = Column(Float, nullable=False, default=0)
    quantity_on_site = Column(Float, nullable=False, default=0)
    unit_cost = Column(Float)  # None = unknown cost, distinct from 0
    status = Column(SQLEnum(MaterialStatus, name='material_status'), nullable=False, default=MaterialStatus.NEEDED)
    vendor = Column(String(255))
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    job = relationship("Job", back_populates="materials")
    catalog_item = relationship("CatalogItem")
    invoice_items = relationship("InvoiceItem", back_populates="job_material")

    __table_args__ = (
        Index('ix_job_materials_job', 'job_id'),
        Index('ix_job_materials_status', 'status'),
        Index('ix_job_materials_trade', 'trade'),
    )

    @property
    def display_name(self):
        if self.custom_name:
            return self.custom_name
        return self.catalog_item.name if self.catalog_item else None

    def to_dict(self):
        return {
            'id': self.id,
            'jobId': self.job_id,
            'catalogItemId': self.catalog_item_id,
            'catalogItem': self.catalog_item.to_dict() if self.catalog_item else None,
            'customName': self.custom_name,
            'description': self.description,
            'trade': enum_value(self.trade),
            'unit': self.unit,
            'quantityNeeded': self.quantity_needed,
            'quantityOrdered': self.quantity_ordered,
            'quantityOnSite': self.quantity_on_site,
            'unitCost': self.unit_cost,
            'status': enum_value(self.status),
            'vendor': self.vendor,
            'notes': self.notes,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


# =============================================================================
# INVOICES
# =============================================================================

class Invoice(Base):
    """Vendor invoice for a job, optionally AI-extracted from uploaded text."""
    __tablename__ = 'invoices'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    job_id = Column(String(36), ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False)
    uploaded_by_id = Column(String(36), ForeignKey('users.id', ondelete='SET NULL'))
    vendor_name = Column(String(255))
    invoice_number = Column(String(100))
    invoice_date = Column(Date)
    total_amount = Column(Float)
    tax_amount = Column(Float)
    status = Column(SQLEnum(InvoiceStatus, name='invoice_status'), nullable=False, default=InvoiceStatus.PENDING)
    file_url = Column(Text)
    file_name = Column(String(255))
    raw_text = Column(Text)
    ai_extracted = Column(JSONType)
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    job = relationship("Job", back_populates="invoices")
    uploaded_by = relationship("User")
    items = relationship("InvoiceItem", back_populates="invoice",
                         cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index('ix_invoices_job', 'job_id'),
        Index('ix_invoices_vendor_name', 'vendor_name'),
        Index('ix_invoices_status', 'status'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'jobId': self.job_id,
            'uploadedById': self.uploaded_by_id,
            'uploadedBy': {'id': self.uploaded_by.id, 'name': self.uploaded_by.name} if self.uploaded_by else None,
            'vendorName': self.vendor_name,
            'invoiceNumber': self.invoice_number,
            'invoiceDate': _iso(self.invoice_date),
            'totalAmount': self.total_amount,
            'taxAmount': self.tax_amount,
            'status': enum_value(self.status),
            'fileUrl': self.file_url,
            'fileName': self.file_name,
            'rawText': self.raw_text,
            'aiExtracted': self.ai_extracted,
            'notes': self.notes,
            'items': [item.to_dict() for item in self.items],
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class InvoiceItem(Base):
    """Invoice line, optionally linked to the job material it pays for."""
    __tablename__ = 'invoice_items'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    invoice_id = Column(String(36), ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False)
    job_material_id = Column(String(36), ForeignKey('job_materials.id', ondelete='SET NULL'))
    description = Column(Text)
    quantity = Column(Float)
    unit_price = Column(Float)
    total_price = Column(Float)

    invoice = relationship("Invoice", back_populates="items")
    job_material = relationship("JobMaterial", back_populates="invoice_items")

    def to_dict(self):
        return {
            'id': self.id,
            'invoiceId': self.invoice_id,
            'jobMaterialId': self.job_material_id,
            'description': self.description,
            'quantity': self.quantity,
            'unitPrice': self.unit_price,
            'totalPrice': self.total_price,
        }


# =============================================================================
# NOTIFICATIONS
# =============================================================================

class Notification(Base):
    """Per-user notifications, optionally tied to a job."""
    __tablename__ = 'notifications'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    job_id = Column(String(36), ForeignKey('jobs.id', ondelete='CASCADE'))
    notification_type = Column(String(50), default='info')  # info, invoice, material, budget
    title = Column(String(255), nullable=False)
    message = Column(Text)
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    job = relationship("Job", back_populates="notifications")

    __table_args__ = (
        Index('ix_notifications_user', 'user_id'),
        Index('ix_notifications_read', 'read'),
        Index('ix_notifications_created_at', 'created_at'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'type': self.notification_type,
            'title': self.title,
            'message': self.message,
            'read': self.read,
            'createdAt': _iso(self.created_at),
            'job': {
                'id': self.job.id,
                'name': self.job.name,
                'jobNumber': self.job.job_number,
            } if self.job else None,
        }
