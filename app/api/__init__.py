"""
API Blueprints Package

All HTTP route handlers for the application, organized by domain.
Each module defines a Flask Blueprint registered in app/__init__.py.

BLUEPRINT REFERENCE:
====================
- jobs.py          : Jobs CRUD and per-job budget (/api/jobs, /api/jobs/<id>/budget)
- materials.py     : Job materials CRUD and file import (/api/jobs/<id>/materials)
- invoices.py      : Job invoices CRUD and AI extraction (/api/jobs/<id>/invoices)
- catalog.py       : Materials catalog tree (/api/catalog)
- reports.py       : Summary, materials and vendor reports, CSV export (/api/reports)
- notifications.py : Per-user notifications (/api/notifications)
- users.py         : User listing (/api/users)
"""

# All blueprints are imported and registered in app/__init__.py
# This file serves as documentation only

__all__ = []
