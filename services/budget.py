"""
Budget & Reporting Aggregation

Pure functions that roll a job's materials and invoices up into budget,
variance and vendor/trade breakdowns, plus the fleet-wide summaries used by
the dashboard and reports pages.

Everything here works on already-fetched snapshots (ORM instances or any
object with the same attributes) and holds no state between calls.

Two "invoiced" conventions coexist on purpose:
- compute_job_budget: `remaining` and `percentUsed` use APPROVED + PAID only
- compute_fleet_summary / compute_vendor_report: totals include every status
"""

import csv
import io
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping

from database.models import InvoiceStatus, enum_value

logger = logging.getLogger(__name__)

UNKNOWN_VENDOR = 'Unknown'
SPENT_STATUSES = frozenset({InvoiceStatus.APPROVED.value, InvoiceStatus.PAID.value})

FLEET_CSV_HEADERS = [
    'Job #', 'Name', 'Status', 'Budget', 'Invoiced',
    'Estimated Cost', 'Materials', 'Invoices',
]


@dataclass(frozen=True)
class BudgetView:
    budget_total: float
    total_invoiced: float
    approved_invoiced: float
    estimated_material_cost: float
    remaining: float
    percent_used: float
    vendor_spending: Dict[str, float] = field(default_factory=dict)
    trade_spending: Dict[str, float] = field(default_factory=dict)
    invoice_count: int = 0
    material_count: int = 0

    @property
    def over_budget(self) -> bool:
        return self.remaining < 0

    def to_dict(self) -> Dict:
        return {
            'budgetTotal': self.budget_total,
            'totalInvoiced': self.total_invoiced,
            'approvedInvoiced': self.approved_invoiced,
            'estimatedMaterialCost': self.estimated_material_cost,
            'remaining': self.remaining,
            'percentUsed': self.percent_used,
            'vendorSpending': dict(self.vendor_spending),
            'tradeSpending': dict(self.trade_spending),
            'invoiceCount': self.invoice_count,
            'materialCount': self.material_count,
        }


@dataclass(frozen=True)
class JobSummaryView:
    id: str
    name: str
    job_number: str
    status: str
    budget: float
    total_invoiced: float
    material_count: int
    invoice_count: int
    estimated_cost: float

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'jobNumber': self.job_number,
            'status': self.status,
            'budget': self.budget,
            'totalInvoiced': self.total_invoiced,
            'materialCount': self.material_count,
            'invoiceCount': self.invoice_count,
            'estimatedCost': self.estimated_cost,
        }


@dataclass(frozen=True)
class VendorSummaryView:
    vendor_name: str
    total_spent: float
    invoice_count: int
    job_count: int

    def to_dict(self) -> Dict:
        return {
            'vendorName': self.vendor_name,
            'totalSpent': self.total_spent,
            'invoiceCount': self.invoice_count,
            'jobCount': self.job_count,
        }


# ============================================================================
# PER-ROW HELPERS
# ============================================================================

def line_cost(material) -> float:
    """Estimated cost of one material line; unknown cost counts as 0."""
    return (material.unit_cost or 0) * (material.quantity_needed or 0)


def invoice_amount(invoice) -> float:
    return invoice.total_amount or 0


def vendor_key(invoice) -> str:
    return invoice.vendor_name or UNKNOWN_VENDOR


def is_spent(invoice) -> bool:
    """APPROVED and PAID invoices count against the budget."""
    return enum_value(invoice.status) in SPENT_STATUSES


def estimated_material_cost(materials: Iterable) -> float:
    return sum((line_cost(m) for m in materials), 0.0)


def total_invoiced(invoices: Iterable) -> float:
    return sum((invoice_amount(i) for i in invoices), 0.0)


def approved_invoiced(invoices: Iterable) -> float:
    return sum((invoice_amount(i) for i in invoices if is_spent(i)), 0.0)


# ============================================================================
# AGGREGATIONS
# ============================================================================

def compute_job_budget(job, materials: List, invoices: List) -> BudgetView:
    """
    Roll up one job's budget.

    Args:
        job: Job snapshot (only budget_total is read)
        materials: the job's JobMaterial snapshots
        invoices: the job's Invoice snapshots

    Returns:
        BudgetView; `remaining` may be negative when the job is over budget
    """
    budget_total = job.budget_total or 0
    approved = approved_invoiced(invoices)

    vendor_spending = defaultdict(float)
    for invoice in invoices:
        vendor_spending[vendor_key(invoice)] += invoice_amount(invoice)

    trade_spending = defaultdict(float)
    for material in materials:
        trade_spending[enum_value(material.trade)] += line_cost(material)

    percent_used = (approved / budget_total) * 100 if budget_total > 0 else 0.0

    return BudgetView(
        budget_total=budget_total,
        total_invoiced=total_invoiced(invoices),
        approved_invoiced=approved,
        estimated_material_cost=estimated_material_cost(materials),
        remaining=budget_total - approved,
        percent_used=percent_used,
        vendor_spending=dict(vendor_spending),
        trade_spending=dict(trade_spending),
        invoice_count=len(invoices),
        material_count=len(materials),
    )


def summarize_job(job) -> JobSummaryView:
    """Fleet-row view of a single job using its loaded materials and invoices."""
    return JobSummaryView(
        id=job.id,
        name=job.name,
        job_number=job.job_number,
        status=enum_value(job.status),
        budget=job.budget_total or 0,
        total_invoiced=total_invoiced(job.invoices),
        material_count=len(job.materials),
        invoice_count=len(job.invoices),
        estimated_cost=estimated_material_cost(job.materials),
    )


def compute_fleet_summary(jobs: Iterable) -> List[JobSummaryView]:
    """Summary row per job; `totalInvoiced` counts invoices of every status."""
    return [summarize_job(job) for job in jobs]


def compute_vendor_report(invoices: Iterable,
                          jobs_by_id: Mapping[str, object]) -> List[VendorSummaryView]:
    """
    Group invoices by vendor across all statuses.

    Args:
        invoices: Invoice snapshots (any order)
        jobs_by_id: job id -> Job snapshot, used to count distinct job numbers

    Returns:
        VendorSummaryView list sorted by vendor name
    """
    totals = defaultdict(float)
    counts = defaultdict(int)
    job_numbers = defaultdict(set)

    for invoice in invoices:
        name = vendor_key(invoice)
        totals[name] += invoice_amount(invoice)
        counts[name] += 1
        job = jobs_by_id.get(invoice.job_id)
        job_numbers[name].add(job.job_number if job is not None else invoice.job_id)

    return [
        VendorSummaryView(
            vendor_name=name,
            total_spent=totals[name],
            invoice_count=counts[name],
            job_count=len(job_numbers[name]),
        )
        for name in sorted(totals)
    ]


def fleet_totals(summaries: Iterable[JobSummaryView]) -> Dict:
    """Dashboard header figures across all jobs."""
    summaries = list(summaries)
    budget = sum((s.budget for s in summaries), 0.0)
    invoiced = sum((s.total_invoiced for s in summaries), 0.0)
    return {
        'totalBudget': budget,
        'totalInvoiced': invoiced,
        'totalEstimated': sum((s.estimated_cost for s in summaries), 0.0),
        'totalMaterials': sum(s.material_count for s in summaries),
        'jobCount': len(summaries),
        'overBudgetJobs': [
            s.job_number for s in summaries
            if s.budget > 0 and s.total_invoiced > s.budget
        ],
        'remaining': budget - invoiced,
    }


def export_fleet_csv(summaries: Iterable[JobSummaryView]) -> str:
    """Render the fleet summary as CSV with two-decimal currency columns."""
    stream = io.StringIO()
    writer = csv.writer(stream, lineterminator='\n')
    writer.writerow(FLEET_CSV_HEADERS)
    rows = 0
    for s in summaries:
        writer.writerow([
            s.job_number,
            s.name,
            s.status,
            f"{s.budget:.2f}",
            f"{s.total_invoiced:.2f}",
            f"{s.estimated_cost:.2f}",
            s.material_count,
            s.invoice_count,
        ])
        rows += 1
    logger.debug(f"Exported {rows} job summary rows to CSV")
    return stream.getvalue()
