"""
Invoices Routes Blueprint

Handles job invoices and AI-assisted extraction:
- /api/jobs/<job_id>/invoices: List/create invoices (with line items)
- /api/jobs/<job_id>/invoices/<invoice_id>: Update/delete an invoice
- /api/jobs/<job_id>/invoices/extract: Extract invoice fields from raw text
"""

import logging
from flask import Blueprint, jsonify, current_app

from database.connection import get_db_session
from services.invoices_repository import InvoicesRepository
from services.invoice_extractor import InvoiceExtractor
from validators import validate_invoice_request
from app.utils.helpers import get_json_body, acting_user_id, require_valid

logger = logging.getLogger(__name__)

# Create blueprint
invoices_bp = Blueprint('invoices_bp', __name__)


@invoices_bp.route('/api/jobs/<job_id>/invoices', methods=['GET'])
def list_invoices(job_id):
    with get_db_session() as session:
        invoices = InvoicesRepository(session).list_invoices(job_id)
    return jsonify(invoices)


@invoices_bp.route('/api/jobs/<job_id>/invoices', methods=['POST'])
def create_invoice(job_id):
    """Create an invoice; the uploader is the acting user."""
    data = get_json_body()
    require_valid(validate_invoice_request(data))

    with get_db_session() as session:
        invoice = InvoicesRepository(session).create_invoice(job_id, data, acting_user_id())
    return jsonify(invoice), 201


@invoices_bp.route('/api/jobs/<job_id>/invoices/<invoice_id>', methods=['PATCH'])
def update_invoice(job_id, invoice_id):
    data = get_json_body()
    require_valid(validate_invoice_request(data))

    with get_db_session() as session:
        invoice = InvoicesRepository(session).update_invoice(job_id, invoice_id, data)
    return jsonify(invoice)


@invoices_bp.route('/api/jobs/<job_id>/invoices/<invoice_id>', methods=['DELETE'])
def delete_invoice(job_id, invoice_id):
    with get_db_session() as session:
        InvoicesRepository(session).delete_invoice(job_id, invoice_id)
    return jsonify({'success': True})


@invoices_bp.route('/api/jobs/<job_id>/invoices/extract', methods=['POST'])
def extract_invoice(job_id):
    """
    Run AI extraction over pasted/uploaded invoice text.

    Body: {"text": "...", "fileName": "optional"}
    Returns {"extracted": {...} | null}; nothing is saved.
    """
    data = get_json_body()
    text = data.get('text') if isinstance(data, dict) else None
    if not text:
        return jsonify({'error': 'No text to extract from'}), 400

    extractor = InvoiceExtractor(current_app.ai_service)
    extracted = extractor.extract(text, data.get('fileName'))
    return jsonify({'extracted': extracted})
