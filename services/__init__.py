"""
Services package for the KenyonCore job tracker.
Contains repository classes for database access plus the budget and import logic.
"""

from services.catalog_repository import CatalogRepository
from services.invoices_repository import InvoicesRepository
from services.jobs_repository import JobsRepository
from services.materials_repository import MaterialsRepository
from services.notification_service import NotificationService
from services.users_repository import UsersRepository

__all__ = [
    'CatalogRepository',
    'InvoicesRepository',
    'JobsRepository',
    'MaterialsRepository',
    'NotificationService',
    'UsersRepository'
]
