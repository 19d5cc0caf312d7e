"""
Pytest configuration and shared fixtures
"""
import os
import sys
import pytest
from datetime import date
from pathlib import Path
from unittest.mock import Mock

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def app_config():
    """Fixture providing test configuration"""
    from config import TestingConfig
    return TestingConfig


@pytest.fixture
def test_env_vars():
    """Fixture providing test environment variables"""
    original_env = os.environ.copy()

    os.environ['FLASK_ENV'] = 'testing'
    os.environ['SECRET_KEY'] = 'test-secret-key-minimum-32-chars-long-for-security'
    os.environ['ANTHROPIC_API_KEY'] = 'test-anthropic-key'

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def db_session():
    """Session on a fresh in-memory SQLite database with all tables created"""
    from database.connection import init_engine, init_db, drop_db, get_session_factory

    init_engine('sqlite://')
    init_db()
    session = get_session_factory()()

    yield session

    session.rollback()
    session.close()
    drop_db()


@pytest.fixture
def app(app_config, tmp_path):
    """Flask app on a fresh in-memory database, logging into tmp_path"""
    from app_init import create_app

    config_class = type('IsolatedTestingConfig', (app_config,), {'LOG_DIR': str(tmp_path / 'logs')})
    flask_app = create_app(config_class)
    yield flask_app


@pytest.fixture
def client(app):
    """Flask test client"""
    return app.test_client()


@pytest.fixture
def sample_users(db_session):
    """An admin and a project manager"""
    from database.models import User, UserRole

    admin = User(name='Admin User', email='admin@example.com', role=UserRole.ADMIN)
    pm = User(name='Pat Manager', email='pm@example.com', role=UserRole.PROJECT_MANAGER)
    db_session.add_all([admin, pm])
    db_session.flush()
    return {'admin': admin, 'pm': pm}


@pytest.fixture
def sample_job(db_session, sample_users):
    """A job with a 10,000 budget managed by the project manager"""
    from database.models import Job, JobStatus

    job = Job(
        name='Smith Residence Renovation',
        job_number='KC-25-0001',
        client_name='John Smith',
        status=JobStatus.IN_PROGRESS,
        budget_total=10000,
        start_date=date(2025, 3, 1),
        project_manager_id=sample_users['pm'].id,
    )
    db_session.add(job)
    db_session.flush()
    return job


@pytest.fixture
def seeded_api(app):
    """
    Users and a job committed through the app's own session factory.

    Returns plain ids so tests never hold detached rows.
    """
    from database.connection import get_db_session
    from database.models import User, UserRole, Job, JobStatus

    with get_db_session() as session:
        admin = User(name='Admin User', email='admin@example.com', role=UserRole.ADMIN)
        pm = User(name='Pat Manager', email='pm@example.com', role=UserRole.PROJECT_MANAGER)
        session.add_all([admin, pm])
        session.flush()
        job = Job(
            name='Smith Residence Renovation',
            job_number='KC-25-0001',
            status=JobStatus.IN_PROGRESS,
            budget_total=10000,
            project_manager_id=pm.id,
        )
        session.add(job)
        session.flush()
        ids = {'admin_id': admin.id, 'pm_id': pm.id, 'job_id': job.id}

    return ids


@pytest.fixture
def sample_csv():
    """Materials CSV using mixed-case header aliases"""
    return (
        "Name,Description,Unit,Qty,Price,Trade,Vendor\n"
        "Copper Pipe 1/2in,Type L,piece,10,18.50,plumbing,Ferguson\n"
        "Romex 12/2,,roll,2,115,Electrical,\n"
        "Mystery Part,,,,,,\n"
    ).encode('utf-8')


@pytest.fixture
def mock_ai_response():
    """Fixture providing mock AI response"""
    class MockResponse:
        def __init__(self, text='{"vendorName": "Ferguson", "totalAmount": 120.5, "items": []}'):
            self.stop_reason = 'end_turn'
            self.content = [
                type('Content', (), {
                    'type': 'text',
                    'text': text
                })()
            ]

    return MockResponse


@pytest.fixture
def mock_anthropic_client(mock_ai_response):
    """Anthropic client double whose messages.create returns mock_ai_response"""
    client = Mock()
    client.messages.create.return_value = mock_ai_response()
    return client
