"""
Database seeding for the KenyonCore job tracker.
Creates default users, a starter catalog and a sample job; safe to run repeatedly.
"""

import logging
from database.connection import get_db_session
from database.models import (
    User, UserRole, Job, JobStatus, Trade,
    CatalogCategory, CatalogSubcategory, CatalogItem,
)

logger = logging.getLogger(__name__)

DEFAULT_USERS = [
    {'name': 'Admin User', 'email': 'admin@kenyoncore.com', 'role': UserRole.ADMIN},
    {'name': 'Project Manager', 'email': 'pm@kenyoncore.com', 'role': UserRole.PROJECT_MANAGER},
]

# (category, trade, subcategory, [(item, unit, price), ...])
DEFAULT_CATALOG = [
    ('Pipes & Fittings', Trade.PLUMBING, 'Copper', [
        ('1/2" Copper Pipe (10ft)', 'piece', 18.50),
        ('3/4" Copper Pipe (10ft)', 'piece', 28.00),
        ('1/2" Copper Elbow 90°', 'each', 2.50),
        ('1/2" Copper Tee', 'each', 3.25),
    ]),
    ('Wire & Cable', Trade.ELECTRICAL, 'Romex / NM-B', [
        ('14/2 NM-B (250ft)', 'roll', 85.00),
        ('12/2 NM-B (250ft)', 'roll', 115.00),
        ('10/3 NM-B (100ft)', 'roll', 125.00),
    ]),
]

SAMPLE_JOB = {
    'name': 'Smith Residence Renovation',
    'job_number': 'KC-25-0001',
    'address': '123 Oak Street, Springfield, IL',
    'client_name': 'John Smith',
    'description': 'Full kitchen and bathroom renovation',
    'status': JobStatus.IN_PROGRESS,
    'budget_total': 45000,
}


def seed_users(session):
    """Create default users that are missing (matched by email)."""
    users = {}
    for data in DEFAULT_USERS:
        user = session.query(User).filter_by(email=data['email']).first()
        if user:
            logger.info(f"User already exists: {user.email}")
        else:
            user = User(**data)
            session.add(user)
            session.flush()
            logger.info(f"Created user: {user.email}")
        users[data['role']] = user
    return users


def seed_catalog(session):
    """Create the starter catalog entries that are missing."""
    for cat_name, trade, sub_name, items in DEFAULT_CATALOG:
        category = session.query(CatalogCategory).filter_by(name=cat_name, trade=trade).first()
        if not category:
            category = CatalogCategory(name=cat_name, trade=trade, sort_order=1)
            session.add(category)
            session.flush()

        subcategory = session.query(CatalogSubcategory).filter_by(
            name=sub_name, category_id=category.id
        ).first()
        if not subcategory:
            subcategory = CatalogSubcategory(name=sub_name, category_id=category.id, sort_order=1)
            session.add(subcategory)
            session.flush()

        existing = {
            name for (name,) in session.query(CatalogItem.name).filter_by(subcategory_id=subcategory.id)
        }
        for name, unit, price in items:
            if name not in existing:
                session.add(CatalogItem(
                    name=name, default_unit=unit, estimated_price=price,
                    subcategory_id=subcategory.id,
                ))
        session.flush()
    logger.info("Catalog seeded")


def seed_sample_job(session, project_manager):
    job = session.query(Job).filter_by(job_number=SAMPLE_JOB['job_number']).first()
    if job:
        logger.info(f"Sample job already exists: {job.job_number}")
        return job
    job = Job(project_manager_id=project_manager.id if project_manager else None, **SAMPLE_JOB)
    session.add(job)
    session.flush()
    logger.info(f"Created sample job: {job.job_number}")
    return job


def seed_database(session=None):
    """
    Seed the database with default data.
    Call this at application startup (SEED_DATABASE) or via `python -m database.seed`.
    """
    if session is not None:
        _seed_all(session)
        return True

    try:
        with get_db_session() as session:
            _seed_all(session)
        logger.info("Database seeding completed successfully")
        return True
    except Exception as e:
        logger.error(f"Database seeding failed: {e}")
        raise


def _seed_all(session):
    users = seed_users(session)
    seed_catalog(session)
    seed_sample_job(session, users.get(UserRole.PROJECT_MANAGER))


if __name__ == '__main__':
    from config import get_config
    from database.connection import init_engine, init_db

    logging.basicConfig(level=logging.INFO)
    config = get_config()
    init_engine(config.DATABASE_URL, **config.SQLALCHEMY_ENGINE_OPTIONS)
    init_db()
    seed_database()
