"""
KenyonCore Job Tracker Application

Construction job materials and invoice tracking API.

MODULAR ARCHITECTURE:
- app_init.py: application factory (config, logging, database, security)
- app/api/: HTTP route handlers (Flask Blueprints)
- services/: repositories, budget aggregation, material import, invoice extraction
- database/: SQLAlchemy models, connection management, seed data
"""
import os

from app_init import create_app

app = create_app()


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    app.run(host='0.0.0.0', port=port, debug=app.config.get('DEBUG', False))
