"""
Job Materials Routes Blueprint

Handles materials tracked against a job:
- /api/jobs/<job_id>/materials: List/create (single or bulk) materials
- /api/jobs/<job_id>/materials/<material_id>: Update/delete a material
- /api/jobs/<job_id>/materials/import: Import a CSV or plain-text materials list
"""

import logging
from flask import Blueprint, request, jsonify

from database.connection import get_db_session
from services.materials_repository import MaterialsRepository
from validators import validate_material_request, validate_import_upload
from app.utils.helpers import get_json_body, require_valid

logger = logging.getLogger(__name__)

# Create blueprint
materials_bp = Blueprint('materials_bp', __name__)


@materials_bp.route('/api/jobs/<job_id>/materials', methods=['GET'])
def list_materials(job_id):
    """List a job's materials; optional ?status= and ?trade= filters."""
    with get_db_session() as session:
        materials = MaterialsRepository(session).list_materials(
            job_id,
            status=request.args.get('status'),
            trade=request.args.get('trade'),
        )
    return jsonify(materials)


@materials_bp.route('/api/jobs/<job_id>/materials', methods=['POST'])
def create_materials(job_id):
    """Create one material (object body) or many (array body) in one transaction."""
    data = get_json_body()
    items = data if isinstance(data, list) else [data]
    for item in items:
        require_valid(validate_material_request(item))

    with get_db_session() as session:
        materials = MaterialsRepository(session).create_materials(job_id, items)
    return jsonify(materials), 201


@materials_bp.route('/api/jobs/<job_id>/materials/<material_id>', methods=['PATCH'])
def update_material(job_id, material_id):
    data = get_json_body()
    require_valid(validate_material_request(data))

    with get_db_session() as session:
        material = MaterialsRepository(session).update_material(job_id, material_id, data)
    return jsonify(material)


@materials_bp.route('/api/jobs/<job_id>/materials/<material_id>', methods=['DELETE'])
def delete_material(job_id, material_id):
    with get_db_session() as session:
        MaterialsRepository(session).delete_material(job_id, material_id)
    return jsonify({'success': True})


@materials_bp.route('/api/jobs/<job_id>/materials/import', methods=['POST'])
def import_materials(job_id):
    """
    Import a materials list from a multipart 'file' upload.

    .csv files are read as a table with a header row; anything else is one
    material per non-blank line. Either every row is created or none is.
    """
    upload = request.files.get('file')
    is_valid, error, filename = validate_import_upload(upload)
    if not is_valid:
        return jsonify({'error': error}), 400

    content = upload.read()
    with get_db_session() as session:
        result = MaterialsRepository(session).import_materials(job_id, content, filename)
    return jsonify(result), 201
