"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_role = sa.Enum('admin', 'supervisor', 'salesperson', name='user_role')
unit_type = sa.Enum('count', 'capacity', 'time', 'users', 'sessions', name='unit_type')
quote_status = sa.Enum('pending', 'pending_approval', 'effective', 'rejected', name='quote_status')
pdf_price_type = sa.Enum('sale', 'minimum', name='pdf_price_type')


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _audit(prefix: str) -> list[sa.Column]:
    return [
        sa.Column(f'{prefix}_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column(f'{prefix}_name', sa.String(255), nullable=True),
        sa.Column(f'{prefix}_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'clients',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('company_name', sa.String(255), nullable=False),
        sa.Column('contact_name', sa.String(255), nullable=False),
        sa.Column('tax_document', sa.String(100), nullable=True),
        sa.Column('personal_phone', sa.String(50), nullable=True),
        sa.Column('company_phone', sa.String(50), nullable=True),
        sa.Column('personal_email', sa.String(255), nullable=True),
        sa.Column('company_email', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_clients_owner_id', 'clients', ['owner_id'])
    op.create_index('ix_clients_tax_document', 'clients', ['tax_document'])

    op.create_table(
        'units_of_measure',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('abbreviation', sa.String(20), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('unit_type', unit_type, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'unit_of_measure_id',
            sa.Integer(),
            sa.ForeignKey('units_of_measure.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'services',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True),
        sa.Column('minimum_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('recommended_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_services_category_id', 'services', ['category_id'])

    op.create_table(
        'quotes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('quote_number', sa.String(50), nullable=False),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('client_id', sa.Integer(), sa.ForeignKey('clients.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('status', quote_status, nullable=False),
        sa.Column('contract_months', sa.Integer(), nullable=False),
        sa.Column('total', sa.Numeric(15, 2), nullable=False),
        sa.Column('original_total', sa.Numeric(15, 2), nullable=True),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('observations', sa.Text(), nullable=True),
        *_audit('approved_by'),
        *_audit('rejected_by'),
        sa.Column('discount_percentage', sa.Numeric(5, 2), nullable=False),
        sa.Column('has_discount', sa.Boolean(), nullable=False),
        sa.Column('discount_comment', sa.Text(), nullable=True),
        *_audit('discount_granted_by'),
        sa.Column('free_months', sa.Integer(), nullable=False),
        sa.Column('has_free_months', sa.Boolean(), nullable=False),
        sa.Column('free_months_comment', sa.Text(), nullable=True),
        *_audit('free_months_granted_by'),
        sa.Column('pdf_generated', sa.Boolean(), nullable=False),
        sa.Column('pdf_path', sa.String(500), nullable=True),
        sa.Column('include_contact_name', sa.Boolean(), nullable=False),
        sa.Column('include_company_name', sa.Boolean(), nullable=False),
        sa.Column('include_tax_document', sa.Boolean(), nullable=False),
        sa.Column('include_company_phone', sa.Boolean(), nullable=False),
        sa.Column('include_company_email', sa.Boolean(), nullable=False),
        sa.Column('pdf_price_type', pdf_price_type, nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_quotes_quote_number', 'quotes', ['quote_number'], unique=True)
    op.create_index('ix_quotes_owner_id', 'quotes', ['owner_id'])
    op.create_index('ix_quotes_client_id', 'quotes', ['client_id'])
    op.create_index('ix_quotes_status', 'quotes', ['status'])

    op.create_table(
        'quote_items',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('quote_id', sa.Integer(), sa.ForeignKey('quotes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('service_id', sa.Integer(), sa.ForeignKey('services.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id', ondelete='RESTRICT'), nullable=False),
        sa.Column(
            'unit_of_measure_id',
            sa.Integer(),
            sa.ForeignKey('units_of_measure.id', ondelete='RESTRICT'),
            nullable=False,
        ),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('duration_months', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('subtotal', sa.Numeric(15, 2), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_quote_items_quote_id', 'quote_items', ['quote_id'])


def downgrade() -> None:
    op.drop_table('quote_items')
    op.drop_table('quotes')
    op.drop_table('services')
    op.drop_table('categories')
    op.drop_table('units_of_measure')
    op.drop_table('clients')
    op.drop_table('users')

    bind = op.get_bind()
    for enum in (pdf_price_type, quote_status, unit_type, user_role):
        enum.drop(bind, checkfirst=True)
