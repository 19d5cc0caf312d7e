"""
Database package for the KenyonCore job tracker.
Provides SQLAlchemy models, connection management, and session handling.
"""

from database.connection import (
    Base,
    init_engine,
    get_engine,
    get_session_factory,
    get_db_session,
    init_db,
    drop_db,
    check_db_connection
)

from database.models import (
    User,
    UserRole,
    Job,
    JobStatus,
    Trade,
    CatalogCategory,
    CatalogSubcategory,
    CatalogItem,
    JobMaterial,
    MaterialStatus,
    Invoice,
    InvoiceItem,
    InvoiceStatus,
    Notification
)

__all__ = [
    # Connection
    'Base',
    'init_engine',
    'get_engine',
    'get_session_factory',
    'get_db_session',
    'init_db',
    'drop_db',
    'check_db_connection',
    # Models
    'User',
    'UserRole',
    'Job',
    'JobStatus',
    'Trade',
    'CatalogCategory',
    'CatalogSubcategory',
    'CatalogItem',
    'JobMaterial',
    'MaterialStatus',
    'Invoice',
    'InvoiceItem',
    'InvoiceStatus',
    'Notification'
]
