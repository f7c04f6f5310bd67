"""initial ledger schema

Revision ID: 0001_initial_ledger
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the ledger tables:
- products / product_code_sequences: stock intake and code allocation
- sales / sale_accessories: sales with snapshotted accessory prices
- accessories, debts, monthly_periods
- app_settings / gate_sessions: password gate and misc settings
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_ledger'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('code', sa.String(length=32), nullable=False),
        sa.Column('purchase_price_cents', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('is_sold', sa.Boolean(), nullable=False),
        sa.Column('month_year', sa.String(length=7), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('quantity >= 0', name='ck_products_quantity_nonneg'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code', name='uq_products_code'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_products_name', 'products', ['name'])
    op.create_index('ix_products_is_sold', 'products', ['is_sold'])
    op.create_index('ix_products_month_year', 'products', ['month_year'])
    op.create_index('ix_products_created_at', 'products', ['created_at'])
    op.create_index('ix_products_sold_month', 'products', ['is_sold', 'month_year'])

    op.create_table(
        'product_code_sequences',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('month_year', sa.String(length=7), nullable=False),
        sa.Column('next_number', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('month_year', name='uq_product_code_sequences_month'),
        sqlite_autoincrement=True
    )

    # product_id is deliberately not a foreign key: products can be deleted
    # while their sales remain.
    op.create_table(
        'sales',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('sale_date', sa.Date(), nullable=False),
        sa.Column('imei', sa.String(length=64), nullable=True),
        sa.Column('sale_price_cents', sa.Integer(), nullable=False),
        sa.Column('cost_cents', sa.Integer(), nullable=False),
        sa.Column('net_profit_cents', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_sales_product_id', 'sales', ['product_id'])
    op.create_index('ix_sales_customer_name', 'sales', ['customer_name'])
    op.create_index('ix_sales_sale_date', 'sales', ['sale_date'])

    op.create_table(
        'sale_accessories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sale_id', sa.Integer(), nullable=False),
        sa.Column('accessory_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price_cents', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['sale_id'], ['sales.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_sale_accessories_sale_id', 'sale_accessories', ['sale_id'])
    op.create_index('ix_sale_accessories_accessory_id', 'sale_accessories', ['accessory_id'])

    op.create_table(
        'accessories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=32), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('quantity >= 0', name='ck_accessories_quantity_nonneg'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_accessories_name', 'accessories', ['name'])
    op.create_index('ix_accessories_type', 'accessories', ['type'])
    op.create_index('ix_accessories_created_at', 'accessories', ['created_at'])

    op.create_table(
        'debts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_debts_date', 'debts', ['date'])

    op.create_table(
        'monthly_periods',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('month_year', sa.String(length=7), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_monthly_periods_month_year', 'monthly_periods', ['month_year'])
    op.create_index('ix_monthly_periods_is_active', 'monthly_periods', ['is_active'])
    op.create_index('ix_monthly_periods_created_at', 'monthly_periods', ['created_at'])

    op.create_table(
        'app_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(length=128), nullable=False),
        sa.Column('value', sa.Text(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('key', name='uq_app_settings_key'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'gate_sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('token_hash', name='uq_gate_sessions_token_hash'),
        sqlite_autoincrement=True
    )


def downgrade():
    op.drop_table('gate_sessions')
    op.drop_table('app_settings')
    op.drop_index('ix_monthly_periods_created_at', table_name='monthly_periods')
    op.drop_index('ix_monthly_periods_is_active', table_name='monthly_periods')
    op.drop_index('ix_monthly_periods_month_year', table_name='monthly_periods')
    op.drop_table('monthly_periods')
    op.drop_index('ix_debts_date', table_name='debts')
    op.drop_table('debts')
    op.drop_index('ix_accessories_created_at', table_name='accessories')
    op.drop_index('ix_accessories_type', table_name='accessories')
    op.drop_index('ix_accessories_name', table_name='accessories')
    op.drop_table('accessories')
    op.drop_index('ix_sale_accessories_accessory_id', table_name='sale_accessories')
    op.drop_index('ix_sale_accessories_sale_id', table_name='sale_accessories')
    op.drop_table('sale_accessories')
    op.drop_index('ix_sales_sale_date', table_name='sales')
    op.drop_index('ix_sales_customer_name', table_name='sales')
    op.drop_index('ix_sales_product_id', table_name='sales')
    op.drop_table('sales')
    op.drop_table('product_code_sequences')
    op.drop_index('ix_products_sold_month', table_name='products')
    op.drop_index('ix_products_created_at', table_name='products')
    op.drop_index('ix_products_month_year', table_name='products')
    op.drop_index('ix_products_is_sold', table_name='products')
    op.drop_index('ix_products_name', table_name='products')
    op.drop_table('products')
