"""
Initial schema: users, zones, chapters, members, packages, memberships, transactions

Revision ID: 001
Revises:
Create Date: 2024-04-01
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def timestamps():
    return [
        sa.Column('created', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), onupdate=sa.func.now()),
    ]


def upgrade() -> None:
    """Create membership and ledger tables."""

    op.create_table(
        'users',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=True),
        sa.Column('role', sa.Enum('admin', 'member', name='userrole'), nullable=False, default='member'),
        sa.Column('active', sa.Boolean, nullable=False, default=True),
        *timestamps(),
    )

    op.create_table(
        'zones',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False, unique=True),
        sa.Column('active', sa.Boolean, nullable=False, default=True),
        *timestamps(),
    )

    op.create_table(
        'chapters',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('zone_id', sa.String(15), sa.ForeignKey('zones.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('active', sa.Boolean, nullable=False, default=True),
        sa.Column('bank_opening_balance', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('bank_closing_balance', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('cash_opening_balance', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('cash_closing_balance', sa.Numeric(12, 2), nullable=False, server_default='0'),
        *timestamps(),
    )

    op.create_table(
        'members',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('chapter_id', sa.String(15), sa.ForeignKey('chapters.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('user_id', sa.String(15), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, unique=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(255), nullable=True, index=True),
        sa.Column('mobile', sa.String(20), nullable=True),
        sa.Column('organization_name', sa.String(200), nullable=True),
        sa.Column('ho_expiry_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('venue_expiry_date', sa.DateTime(timezone=True), nullable=True),
        *timestamps(),
    )

    op.create_table(
        'packages',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('period_months', sa.Integer, nullable=False, default=12),
        sa.Column('is_venue_fee', sa.Boolean, nullable=False, default=False),
        sa.Column('chapter_id', sa.String(15), sa.ForeignKey('chapters.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('basic_fees', sa.Numeric(12, 2), nullable=False),
        sa.Column('gst_rate', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('active', sa.Boolean, nullable=False, default=True),
        *timestamps(),
    )

    op.create_table(
        'memberships',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('member_id', sa.String(15), sa.ForeignKey('members.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('package_id', sa.String(15), sa.ForeignKey('packages.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('invoice_number', sa.String(20), nullable=False),
        sa.Column('invoice_date', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('package_start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('package_end_date', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('basic_fees', sa.Numeric(12, 2), nullable=False),
        sa.Column('cgst_rate', sa.Numeric(5, 2), nullable=True),
        sa.Column('sgst_rate', sa.Numeric(5, 2), nullable=True),
        sa.Column('igst_rate', sa.Numeric(5, 2), nullable=True),
        sa.Column('cgst_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('sgst_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('igst_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('total_fees', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('payment_mode', sa.String(50), nullable=True),
        sa.Column('payment_reference', sa.String(100), nullable=True),
        sa.Column('bank_name', sa.String(100), nullable=True),
        sa.Column('active', sa.Boolean, nullable=False, default=True),
        *timestamps(),
        sa.UniqueConstraint('invoice_number', name='uq_memberships_invoice_number'),
    )

    op.create_table(
        'transactions',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('chapter_id', sa.String(15), sa.ForeignKey('chapters.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('account_type', sa.Enum('cash', 'bank', name='accounttype'), nullable=False, index=True),
        sa.Column('transaction_type', sa.Enum('credit', 'debit', name='transactiontype'), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('transaction_head', sa.String(200), nullable=True),
        sa.Column('narration', sa.Text, nullable=True),
        sa.Column('transaction_details', sa.Text, nullable=True),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('reference', sa.String(100), nullable=True),
        sa.Column('has_invoice', sa.Boolean, nullable=False, default=False),
        sa.Column('gst_rate', sa.Numeric(5, 2), nullable=True),
        sa.Column('gst_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('invoice_number', sa.String(100), nullable=True),
        sa.Column('party_name', sa.String(200), nullable=True),
        sa.Column('party_gst_no', sa.String(20), nullable=True),
        sa.Column('party_address', sa.Text, nullable=True),
        *timestamps(),
    )


def downgrade() -> None:
    """Drop membership and ledger tables."""
    op.drop_table('transactions')
    op.drop_table('memberships')
    op.drop_table('packages')
    op.drop_table('members')
    op.drop_table('chapters')
    op.drop_table('zones')
    op.drop_table('users')

    # Drop enum types
    op.execute('DROP TYPE IF EXISTS transactiontype')
    op.execute('DROP TYPE IF EXISTS accounttype')
    op.execute('DROP TYPE IF EXISTS userrole')
