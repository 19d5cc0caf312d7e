"""
Jobs Routes Blueprint

Handles job management and the per-job budget roll-up:
- /api/jobs: List/create jobs
- /api/jobs/<job_id>: Get/update/delete a job
- /api/jobs/<job_id>/budget: Budget, variance and spending breakdowns
"""

import logging
from flask import Blueprint, request, jsonify, current_app

from database.connection import get_db_session
from services.jobs_repository import JobsRepository
from validators import validate_job_request
from app.utils.helpers import get_json_body, require_valid

logger = logging.getLogger(__name__)

# Create blueprint
jobs_bp = Blueprint('jobs_bp', __name__)


def _repository(session):
    return JobsRepository(session, current_app.config.get('JOB_NUMBER_PREFIX', 'KC'))


@jobs_bp.route('/api/jobs', methods=['GET'])
def list_jobs():
    """List jobs; optional ?status= and ?search= filters."""
    with get_db_session() as session:
        jobs = _repository(session).list_jobs(
            status=request.args.get('status'),
            search=request.args.get('search'),
        )
    return jsonify(jobs)


@jobs_bp.route('/api/jobs', methods=['POST'])
def create_job():
    data = get_json_body()
    require_valid(validate_job_request(data))

    with get_db_session() as session:
        job = _repository(session).create_job(data)
    return jsonify(job), 201


@jobs_bp.route('/api/jobs/<job_id>', methods=['GET'])
def get_job(job_id):
    with get_db_session() as session:
        job = _repository(session).get_job(job_id)
    return jsonify(job)


@jobs_bp.route('/api/jobs/<job_id>', methods=['PATCH'])
def update_job(job_id):
    data = get_json_body()
    require_valid(validate_job_request(data, partial=True))

    with get_db_session() as session:
        job = _repository(session).update_job(job_id, data)
    return jsonify(job)


@jobs_bp.route('/api/jobs/<job_id>', methods=['DELETE'])
def delete_job(job_id):
    with get_db_session() as session:
        _repository(session).delete_job(job_id)
    return jsonify({'success': True})


@jobs_bp.route('/api/jobs/<job_id>/budget', methods=['GET'])
def get_budget(job_id):
    """Budget view: invoiced totals, remaining, percent used, vendor and trade spending."""
    with get_db_session() as session:
        view = _repository(session).get_budget(job_id)
    return jsonify(view.to_dict())
