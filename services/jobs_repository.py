"""
Jobs Repository - Database access layer for jobs, budgets and fleet reports.
"""

import logging
import random
from datetime import datetime
from typing import List, Optional, Dict
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import or_

from database.models import Job, JobStatus, Invoice, JobMaterial
from services import budget
from services.exceptions import StoreFailure
from services.store import get_or_raise, flush_or_fail, parse_date, coerce_enum

logger = logging.getLogger(__name__)

JOB_NUMBER_ATTEMPTS = 20

# request key -> (model attribute, converter)
JOB_FIELDS = {
    'name': ('name', None),
    'address': ('address', None),
    'clientName': ('client_name', None),
    'description': ('description', None),
    'status': ('status', lambda v: coerce_enum(JobStatus, v, JobStatus.PLANNING)),
    'startDate': ('start_date', parse_date),
    'endDate': ('end_date', parse_date),
    'budgetTotal': ('budget_total', lambda v: v or 0),
    'projectManagerId': ('project_manager_id', lambda v: v or None),
}


def generate_job_number(prefix: str = 'KC', now: datetime = None) -> str:
    """Job number like KC-25-0042 (two-digit year, four random digits)."""
    now = now or datetime.utcnow()
    return f"{prefix}-{now.strftime('%y')}-{random.randint(0, 9999):04d}"


class JobsRepository:
    """Repository for job database operations."""

    def __init__(self, session: Session, job_number_prefix: str = 'KC'):
        self.session = session
        self.job_number_prefix = job_number_prefix

    def _load(self, job_id: str) -> Job:
        return get_or_raise(self.session, Job, job_id, 'Job')

    def list_jobs(self, status: str = None, search: str = None) -> List[Dict]:
        """List jobs, most recently updated first."""
        query = self.session.query(Job).options(
            selectinload(Job.project_manager),
            selectinload(Job.materials),
            selectinload(Job.invoices),
        )
        if status:
            query = query.filter(Job.status == coerce_enum(JobStatus, status))
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Job.name.ilike(pattern),
                Job.job_number.ilike(pattern),
                Job.client_name.ilike(pattern),
            ))
        jobs = query.order_by(Job.updated_at.desc()).all()
        return [job.to_dict() for job in jobs]

    def get_job(self, job_id: str) -> Dict:
        """Job with its materials, invoices and counts."""
        return self._load(job_id).to_dict(include_children=True)

    def _unused_job_number(self) -> str:
        for _ in range(JOB_NUMBER_ATTEMPTS):
            candidate = generate_job_number(self.job_number_prefix)
            exists = self.session.query(Job.id).filter(Job.job_number == candidate).first()
            if not exists:
                return candidate
        raise StoreFailure("Could not allocate a unique job number")

    def create_job(self, data: Dict) -> Dict:
        """Create a new job; a job number is always generated."""
        job = Job(job_number=self._unused_job_number())
        for key, (attr, convert) in JOB_FIELDS.items():
            value = data.get(key)
            setattr(job, attr, convert(value) if convert else value)
        self.session.add(job)
        flush_or_fail(self.session, 'create job')
        logger.info(f"Created job {job.job_number}: {job.id}")
        return job.to_dict()

    def update_job(self, job_id: str, data: Dict) -> Dict:
        """Apply only the fields present in data."""
        job = self._load(job_id)
        for key, (attr, convert) in JOB_FIELDS.items():
            if key in data:
                value = data[key]
                setattr(job, attr, convert(value) if convert else value)
        job.updated_at = datetime.utcnow()
        flush_or_fail(self.session, 'update job')
        logger.info(f"Updated job: {job_id}")
        return job.to_dict()

    def delete_job(self, job_id: str) -> bool:
        """Delete a job together with its materials, invoices and notifications."""
        job = self._load(job_id)
        self.session.delete(job)
        flush_or_fail(self.session, 'delete job')
        logger.info(f"Deleted job: {job_id}")
        return True

    # ------------------------------------------------------------------
    # Budget & reports
    # ------------------------------------------------------------------

    def get_budget(self, job_id: str) -> budget.BudgetView:
        job = self._load(job_id)
        materials = self.session.query(JobMaterial).filter(JobMaterial.job_id == job_id).all()
        invoices = self.session.query(Invoice).filter(Invoice.job_id == job_id).all()
        return budget.compute_job_budget(job, materials, invoices)

    def fleet_summary(self) -> List[budget.JobSummaryView]:
        jobs = self.session.query(Job).options(
            selectinload(Job.materials),
            selectinload(Job.invoices),
        ).order_by(Job.job_number).all()
        return budget.compute_fleet_summary(jobs)

    def vendor_report(self, job_id: Optional[str] = None) -> List[budget.VendorSummaryView]:
        query = self.session.query(Invoice)
        if job_id:
            self._load(job_id)
            query = query.filter(Invoice.job_id == job_id)
        invoices = query.all()

        job_ids = {inv.job_id for inv in invoices}
        jobs_by_id = {}
        if job_ids:
            jobs_by_id = {
                job.id: job
                for job in self.session.query(Job).filter(Job.id.in_(job_ids)).all()
            }
        return budget.compute_vendor_report(invoices, jobs_by_id)
