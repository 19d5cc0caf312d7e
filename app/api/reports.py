"""
Reports Routes Blueprint

- /api/reports?type=summary: one summary row per job (all invoice statuses)
- /api/reports?type=totals: dashboard figures summed across jobs
- /api/reports?type=materials&jobId=: a job's materials by trade and status
- /api/reports?type=vendors[&jobId=]: spending per vendor
- /api/reports/export: job summary as a CSV download
"""

import logging
from datetime import datetime
from flask import Blueprint, request, jsonify, Response

from database.connection import get_db_session
from services.jobs_repository import JobsRepository
from services.materials_repository import MaterialsRepository
from services.budget import export_fleet_csv, fleet_totals

logger = logging.getLogger(__name__)

# Create blueprint
reports_bp = Blueprint('reports_bp', __name__)


@reports_bp.route('/api/reports', methods=['GET'])
def get_report():
    report_type = request.args.get('type') or 'summary'
    job_id = request.args.get('jobId')

    with get_db_session() as session:
        if report_type == 'summary':
            rows = [s.to_dict() for s in JobsRepository(session).fleet_summary()]
            return jsonify(rows)

        if report_type == 'totals':
            return jsonify(fleet_totals(JobsRepository(session).fleet_summary()))

        if report_type == 'materials' and job_id:
            return jsonify(MaterialsRepository(session).materials_report(job_id))

        if report_type == 'vendors':
            rows = [v.to_dict() for v in JobsRepository(session).vendor_report(job_id)]
            return jsonify(rows)

    return jsonify({'error': 'Invalid report type'}), 400


@reports_bp.route('/api/reports/export', methods=['GET'])
def export_report():
    """Download the job summary as CSV."""
    with get_db_session() as session:
        summaries = JobsRepository(session).fleet_summary()

    filename = f"kenyoncore-report-{datetime.utcnow().strftime('%Y-%m-%d')}.csv"
    logger.info(f"Exporting job summary CSV ({len(summaries)} jobs)")
    return Response(
        export_fleet_csv(summaries),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )
