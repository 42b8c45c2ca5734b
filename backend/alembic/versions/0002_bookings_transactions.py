"""bookings and transactions

Revision ID: 0002_bookings_transactions
Revises: 0001_initial
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0002_bookings_transactions'
down_revision: Union[str, None] = '0001_initial'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

def upgrade() -> None:
    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('ticket_id', sa.Integer(), sa.ForeignKey('tickets.id'), nullable=False),
        sa.Column('user_email', sa.String(length=255), nullable=False),
        sa.Column('vendor_email', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('total_price', sa.Numeric(10,2), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('payment_status', sa.String(length=16), nullable=False, server_default='unpaid'),
        sa.Column('transaction_id', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_bookings_ticket_id', 'bookings', ['ticket_id'])
    op.create_index('ix_bookings_user_email', 'bookings', ['user_email'])
    op.create_index('ix_bookings_vendor_email', 'bookings', ['vendor_email'])
    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('provider_transaction_id', sa.String(length=255), nullable=False),
        sa.Column('booking_id', sa.Integer(), sa.ForeignKey('bookings.id', ondelete='SET NULL'), nullable=True),
        sa.Column('ticket_id', sa.Integer(), nullable=True),
        sa.Column('user_email', sa.String(length=255), nullable=False),
        sa.Column('vendor_email', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Numeric(10,2), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('ticket_title', sa.String(length=255), nullable=True),
        sa.Column('paid_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        # settlement relies on this constraint to apply a payment only once
        sa.UniqueConstraint('provider_transaction_id', name='uq_transactions_provider_transaction_id'),
    )
    op.create_index('ix_transactions_booking_id', 'transactions', ['booking_id'])
    op.create_index('ix_transactions_user_email', 'transactions', ['user_email'])
    op.create_index('ix_transactions_vendor_email', 'transactions', ['vendor_email'])


def downgrade() -> None:
    op.drop_index('ix_transactions_vendor_email', table_name='transactions')
    op.drop_index('ix_transactions_user_email', table_name='transactions')
    op.drop_index('ix_transactions_booking_id', table_name='transactions')
    op.drop_table('transactions')
    op.drop_index('ix_bookings_vendor_email', table_name='bookings')
    op.drop_index('ix_bookings_user_email', table_name='bookings')
    op.drop_index('ix_bookings_ticket_id', table_name='bookings')
    op.drop_table('bookings')
