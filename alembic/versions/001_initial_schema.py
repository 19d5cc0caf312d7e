"""Initial database schema

Revision ID: 001
Revises:
Create Date: 2025-06-02

Creates users, jobs, catalog, job materials, invoices and notifications.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

TRADES = ('GENERAL', 'PLUMBING', 'ELECTRICAL', 'HVAC', 'CARPENTRY',
          'PAINTING', 'ROOFING', 'FLOORING', 'CONCRETE', 'LANDSCAPING')

user_role = sa.Enum('ADMIN', 'PROJECT_MANAGER', 'FIELD_CREW', name='user_role')
job_status = sa.Enum('PLANNING', 'IN_PROGRESS', 'ON_HOLD', 'COMPLETED', 'CANCELLED', name='job_status')
trade = sa.Enum(*TRADES, name='trade')
material_status = sa.Enum('NEEDED', 'ORDERED', 'DELIVERED', 'INSTALLED', 'RETURNED', name='material_status')
invoice_status = sa.Enum('PENDING', 'APPROVED', 'DISPUTED', 'PAID', name='invoice_status')


def upgrade() -> None:
    # Users table
    op.create_table('users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('phone', sa.String(50)),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_index('ix_users_role', 'users', ['role'])

    # Jobs table
    op.create_table('jobs',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('job_number', sa.String(50), nullable=False),
        sa.Column('address', sa.Text()),
        sa.Column('client_name', sa.String(255)),
        sa.Column('description', sa.Text()),
        sa.Column('status', job_status, nullable=False),
        sa.Column('start_date', sa.Date()),
        sa.Column('end_date', sa.Date()),
        sa.Column('budget_total', sa.Float(), nullable=False, server_default='0'),
        sa.Column('project_manager_id', sa.String(36)),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now()),
        sa.ForeignKeyConstraint(['project_manager_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('job_number')
    )
    op.create_index('ix_jobs_status', 'jobs', ['status'])
    op.create_index('ix_jobs_project_manager', 'jobs', ['project_manager_id'])
    op.create_index('ix_jobs_updated_at', 'jobs', ['updated_at'])

    # Catalog tree
    op.create_table('catalog_categories',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('trade', trade, nullable=False),
        sa.Column('sort_order', sa.Integer(), server_default='0'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', 'trade', name='uq_catalog_categories_name_trade')
    )

    op.create_table('catalog_subcategories',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('category_id', sa.String(36), nullable=False),
        sa.Column('sort_order', sa.Integer(), server_default='0'),
        sa.ForeignKeyConstraint(['category_id'], ['catalog_categories.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', 'category_id', name='uq_catalog_subcategories_name_category')
    )

    op.create_table('catalog_items',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('default_unit', sa.String(50), nullable=False, server_default='each'),
        sa.Column('estimated_price', sa.Float()),
        sa.Column('subcategory_id', sa.String(36), nullable=False),
        sa.ForeignKeyConstraint(['subcategory_id'], ['catalog_subcategories.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', 'subcategory_id', name='uq_catalog_items_name_subcategory')
    )

    # Job materials table
    op.create_table('job_materials',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('job_id', sa.String(36), nullable=False),
        sa.Column('catalog_item_id', sa.String(36)),
        sa.Column('custom_name', sa.String(255)),
        sa.Column('description', sa.Text()),
        sa.Column('trade', trade, nullable=False),
        sa.Column('unit', sa.String(50), nullable=False, server_default='each'),
        sa.Column('quantity_needed', sa.Float(), nullable=False, server_default='0'),
        sa.Column('quantity_ordered', sa.Float(), nullable=False, server_default='0'),
        sa.Column('quantity_on_site', sa.Float(), nullable=False, server_default='0'),
        sa.Column('unit_cost', sa.Float()),
        sa.Column('status', material_status, nullable=False),
        sa.Column('vendor', sa.String(255)),
        sa.Column('notes', sa.Text()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now()),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['catalog_item_id'], ['catalog_items.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_job_materials_job', 'job_materials', ['job_id'])
    op.create_index('ix_job_materials_status', 'job_materials', ['status'])
    op.create_index('ix_job_materials_trade', 'job_materials', ['trade'])

    # Invoices table
    op.create_table('invoices',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('job_id', sa.String(36), nullable=False),
        sa.Column('uploaded_by_id', sa.String(36)),
        sa.Column('vendor_name', sa.String(255)),
        sa.Column('invoice_number', sa.String(100)),
        sa.Column('invoice_date', sa.Date()),
        sa.Column('total_amount', sa.Float()),
        sa.Column('tax_amount', sa.Float()),
        sa.Column('status', invoice_status, nullable=False),
        sa.Column('file_url', sa.Text()),
        sa.Column('file_name', sa.String(255)),
        sa.Column('raw_text', sa.Text()),
        sa.Column('ai_extracted', postgresql.JSONB),
        sa.Column('notes', sa.Text()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now()),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['uploaded_by_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_invoices_job', 'invoices', ['job_id'])
    op.create_index('ix_invoices_vendor_name', 'invoices', ['vendor_name'])
    op.create_index('ix_invoices_status', 'invoices', ['status'])

    op.create_table('invoice_items',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('invoice_id', sa.String(36), nullable=False),
        sa.Column('job_material_id', sa.String(36)),
        sa.Column('description', sa.Text()),
        sa.Column('quantity', sa.Float()),
        sa.Column('unit_price', sa.Float()),
        sa.Column('total_price', sa.Float()),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['job_material_id'], ['job_materials.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )

    # Notifications table
    op.create_table('notifications',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('job_id', sa.String(36)),
        sa.Column('notification_type', sa.String(50), server_default='info'),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text()),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notifications_user', 'notifications', ['user_id'])
    op.create_index('ix_notifications_read', 'notifications', ['read'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])


def downgrade() -> None:
    # Drop tables in reverse order of creation (respecting foreign keys)
    op.drop_table('notifications')
    op.drop_table('invoice_items')
    op.drop_table('invoices')
    op.drop_table('job_materials')
    op.drop_table('catalog_items')
    op.drop_table('catalog_subcategories')
    op.drop_table('catalog_categories')
    op.drop_table('jobs')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (invoice_status, material_status, trade, job_status, user_role):
        enum_type.drop(bind, checkfirst=True)
