"""initial schema: users and tickets

Revision ID: 0001_initial
Revises: 
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('photo_url', sa.String(length=1024), nullable=True),
        sa.Column('role', sa.String(length=32), nullable=False, server_default='user'),
        sa.Column('is_fraud', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('last_logged_in', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_table('tickets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('vendor_email', sa.String(length=255), nullable=False),
        sa.Column('vendor_name', sa.String(length=255), nullable=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('origin', sa.String(length=120), nullable=False),
        sa.Column('destination', sa.String(length=120), nullable=False),
        sa.Column('transport_type', sa.String(length=32), nullable=False),
        sa.Column('price', sa.Numeric(10,2), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('departure_at', sa.DateTime(), nullable=False),
        sa.Column('perks', sa.Text(), nullable=True),
        sa.Column('image', sa.Text(), nullable=True),
        sa.Column('is_advertised', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('verification_status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('is_hidden', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint('quantity >= 0', name='ck_tickets_quantity_non_negative'),
    )
    op.create_index('ix_tickets_vendor_email', 'tickets', ['vendor_email'])
    op.create_index('ix_tickets_origin', 'tickets', ['origin'])
    op.create_index('ix_tickets_destination', 'tickets', ['destination'])
    op.create_index('ix_tickets_transport_type', 'tickets', ['transport_type'])
    op.create_index('ix_tickets_verification_status', 'tickets', ['verification_status'])

def downgrade():
    op.drop_index('ix_tickets_verification_status', table_name='tickets')
    op.drop_index('ix_tickets_transport_type', table_name='tickets')
    op.drop_index('ix_tickets_destination', table_name='tickets')
    op.drop_index('ix_tickets_origin', table_name='tickets')
    op.drop_index('ix_tickets_vendor_email', table_name='tickets')
    op.drop_table('tickets')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
