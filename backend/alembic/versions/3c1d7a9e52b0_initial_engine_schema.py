"""initial engine schema

Revision ID: 3c1d7a9e52b0
Revises:
Create Date: 2026-10-17 10:12:04.118223

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1d7a9e52b0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('instruments',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('ticker', sa.String(), nullable=False),
    sa.Column('name', sa.String(), nullable=True),
    sa.Column('asset_type', sa.String(), nullable=False),
    sa.Column('currency', sa.String(length=3), nullable=False),
    sa.Column('emission_date', sa.Date(), nullable=True),
    sa.Column('maturity_date', sa.Date(), nullable=True),
    sa.Column('coupon_rate', sa.Numeric(precision=10, scale=6), nullable=False),
    sa.Column('frequency_months', sa.Integer(), nullable=True),
    sa.Column('amortization', sa.String(), nullable=False),
    sa.Column('face_value', sa.Numeric(precision=18, scale=6), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.Column('updated_at', sa.DateTime(), nullable=True),
    sa.CheckConstraint('coupon_rate >= 0', name='ck_instrument_coupon_rate_non_negative'),
    sa.CheckConstraint('face_value > 0', name='ck_instrument_face_value_positive'),
    sa.CheckConstraint('frequency_months > 0', name='ck_instrument_frequency_positive'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('ticker')
    )
    op.create_table('contracts',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('property_name', sa.String(), nullable=False),
    sa.Column('tenant_name', sa.String(), nullable=True),
    sa.Column('start_date', sa.Date(), nullable=False),
    sa.Column('duration_months', sa.Integer(), nullable=False),
    sa.Column('initial_rent', sa.Numeric(precision=18, scale=2), nullable=False),
    sa.Column('currency', sa.String(length=3), nullable=False),
    sa.Column('adjustment_type', sa.String(), nullable=False),
    sa.Column('adjustment_frequency', sa.Integer(), nullable=False),
    sa.Column('adjustment_rate', sa.Numeric(precision=10, scale=6), nullable=True),
    sa.Column('index_type', sa.String(), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.Column('updated_at', sa.DateTime(), nullable=True),
    sa.CheckConstraint('adjustment_frequency > 0', name='ck_contract_adjustment_frequency_positive'),
    sa.CheckConstraint('duration_months > 0', name='ck_contract_duration_positive'),
    sa.CheckConstraint('initial_rent >= 0', name='ck_contract_initial_rent_non_negative'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('index_points',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('type', sa.String(), nullable=False),
    sa.Column('date', sa.Date(), nullable=False),
    sa.Column('value', sa.Numeric(precision=18, scale=6), nullable=False),
    sa.Column('interannual_value', sa.Numeric(precision=18, scale=6), nullable=True),
    sa.Column('is_manual', sa.Boolean(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.Column('updated_at', sa.DateTime(), nullable=True),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('type', 'date', name='uq_index_point_type_date')
    )
    op.create_index(op.f('ix_index_points_type'), 'index_points', ['type'], unique=False)
    op.create_index(op.f('ix_index_points_date'), 'index_points', ['date'], unique=False)
    op.create_table('amortization_entries',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('instrument_id', sa.String(length=36), nullable=False),
    sa.Column('payment_date', sa.Date(), nullable=False),
    sa.Column('percentage', sa.Numeric(precision=10, scale=6), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.CheckConstraint('percentage > 0', name='ck_amortization_entry_percentage_positive'),
    sa.ForeignKeyConstraint(['instrument_id'], ['instruments.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('instrument_id', 'payment_date', name='uq_amortization_entry_instrument_date')
    )
    op.create_index(op.f('ix_amortization_entries_instrument_id'), 'amortization_entries', ['instrument_id'], unique=False)
    op.create_table('transactions',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('instrument_id', sa.String(length=36), nullable=False),
    sa.Column('trade_date', sa.Date(), nullable=False),
    sa.Column('side', sa.String(), nullable=False),
    sa.Column('quantity', sa.Numeric(precision=18, scale=8), nullable=False),
    sa.Column('price', sa.Numeric(precision=18, scale=6), nullable=False),
    sa.Column('commission', sa.Numeric(precision=18, scale=6), nullable=False),
    sa.Column('currency', sa.String(length=3), nullable=False),
    sa.Column('notes', sa.String(), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.Column('updated_at', sa.DateTime(), nullable=True),
    sa.CheckConstraint('commission >= 0', name='ck_transaction_commission_non_negative'),
    sa.CheckConstraint('price >= 0', name='ck_transaction_price_non_negative'),
    sa.CheckConstraint('quantity > 0', name='ck_transaction_quantity_positive'),
    sa.ForeignKeyConstraint(['instrument_id'], ['instruments.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_transactions_instrument_id'), 'transactions', ['instrument_id'], unique=False)
    op.create_index(op.f('ix_transactions_trade_date'), 'transactions', ['trade_date'], unique=False)
    op.create_table('position_lots',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('instrument_id', sa.String(length=36), nullable=False),
    sa.Column('transaction_id', sa.String(length=36), nullable=True),
    sa.Column('acquired_on', sa.Date(), nullable=False),
    sa.Column('quantity', sa.Numeric(precision=18, scale=8), nullable=False),
    sa.Column('original_quantity', sa.Numeric(precision=18, scale=8), nullable=False),
    sa.Column('unit_cost', sa.Numeric(precision=18, scale=6), nullable=False),
    sa.Column('commission', sa.Numeric(precision=18, scale=2), nullable=False),
    sa.Column('currency', sa.String(length=3), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.CheckConstraint('quantity > 0', name='ck_position_lot_quantity_positive'),
    sa.ForeignKeyConstraint(['instrument_id'], ['instruments.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_position_lots_instrument_id'), 'position_lots', ['instrument_id'], unique=False)
    op.create_table('realized_gains',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('instrument_id', sa.String(length=36), nullable=False),
    sa.Column('transaction_id', sa.String(length=36), nullable=True),
    sa.Column('sell_date', sa.Date(), nullable=False),
    sa.Column('buy_dates', sa.String(), nullable=False),
    sa.Column('quantity', sa.Numeric(precision=18, scale=8), nullable=False),
    sa.Column('buy_unit_cost', sa.Numeric(precision=18, scale=6), nullable=False),
    sa.Column('sell_unit_price', sa.Numeric(precision=18, scale=6), nullable=False),
    sa.Column('buy_commission', sa.Numeric(precision=18, scale=2), nullable=False),
    sa.Column('sell_commission', sa.Numeric(precision=18, scale=2), nullable=False),
    sa.Column('cost_basis', sa.Numeric(precision=18, scale=2), nullable=False),
    sa.Column('proceeds', sa.Numeric(precision=18, scale=2), nullable=False),
    sa.Column('gain', sa.Numeric(precision=18, scale=2), nullable=False),
    sa.Column('gain_percent', sa.Numeric(precision=12, scale=4), nullable=False),
    sa.Column('currency', sa.String(length=3), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.ForeignKeyConstraint(['instrument_id'], ['instruments.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_realized_gains_instrument_id'), 'realized_gains', ['instrument_id'], unique=False)
    op.create_index(op.f('ix_realized_gains_sell_date'), 'realized_gains', ['sell_date'], unique=False)
    op.create_table('cashflows',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('instrument_id', sa.String(length=36), nullable=False),
    sa.Column('sequence', sa.Integer(), nullable=False),
    sa.Column('payment_date', sa.Date(), nullable=False),
    sa.Column('amount', sa.Numeric(precision=18, scale=2), nullable=False),
    sa.Column('currency', sa.String(length=3), nullable=False),
    sa.Column('kind', sa.String(), nullable=False),
    sa.Column('residual_capital', sa.Numeric(precision=18, scale=2), nullable=False),
    sa.Column('description', sa.String(), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.ForeignKeyConstraint(['instrument_id'], ['instruments.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_cashflows_instrument_id'), 'cashflows', ['instrument_id'], unique=False)
    op.create_index(op.f('ix_cashflows_payment_date'), 'cashflows', ['payment_date'], unique=False)
    op.create_table('rental_cashflows',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('contract_id', sa.String(length=36), nullable=False),
    sa.Column('month_index', sa.Integer(), nullable=False),
    sa.Column('payment_date', sa.Date(), nullable=False),
    sa.Column('amount', sa.Numeric(precision=18, scale=2), nullable=False),
    sa.Column('currency', sa.String(length=3), nullable=False),
    sa.Column('amount_local', sa.Numeric(precision=18, scale=2), nullable=True),
    sa.Column('amount_reporting', sa.Numeric(precision=18, scale=2), nullable=True),
    sa.Column('index_monthly', sa.Numeric(precision=12, scale=6), nullable=True),
    sa.Column('adjustment_percent', sa.Numeric(precision=12, scale=6), nullable=True),
    sa.Column('inflation_accumulated', sa.Numeric(precision=12, scale=6), nullable=True),
    sa.Column('fx_rate', sa.Numeric(precision=18, scale=6), nullable=True),
    sa.Column('fx_rate_base', sa.Numeric(precision=18, scale=6), nullable=True),
    sa.Column('fx_rate_month_close', sa.Numeric(precision=18, scale=6), nullable=True),
    sa.Column('devaluation_accumulated', sa.Numeric(precision=12, scale=6), nullable=True),
    sa.Column('is_adjustment', sa.Boolean(), nullable=False),
    sa.Column('is_provisional', sa.Boolean(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.ForeignKeyConstraint(['contract_id'], ['contracts.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('contract_id', 'month_index', name='uq_rental_cashflow_contract_month')
    )
    op.create_index(op.f('ix_rental_cashflows_contract_id'), 'rental_cashflows', ['contract_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_rental_cashflows_contract_id'), table_name='rental_cashflows')
    op.drop_table('rental_cashflows')
    op.drop_index(op.f('ix_cashflows_payment_date'), table_name='cashflows')
    op.drop_index(op.f('ix_cashflows_instrument_id'), table_name='cashflows')
    op.drop_table('cashflows')
    op.drop_index(op.f('ix_realized_gains_sell_date'), table_name='realized_gains')
    op.drop_index(op.f('ix_realized_gains_instrument_id'), table_name='realized_gains')
    op.drop_table('realized_gains')
    op.drop_index(op.f('ix_position_lots_instrument_id'), table_name='position_lots')
    op.drop_table('position_lots')
    op.drop_index(op.f('ix_transactions_trade_date'), table_name='transactions')
    op.drop_index(op.f('ix_transactions_instrument_id'), table_name='transactions')
    op.drop_table('transactions')
    op.drop_index(op.f('ix_amortization_entries_instrument_id'), table_name='amortization_entries')
    op.drop_table('amortization_entries')
    op.drop_index(op.f('ix_index_points_date'), table_name='index_points')
    op.drop_index(op.f('ix_index_points_type'), table_name='index_points')
    op.drop_table('index_points')
    op.drop_table('contracts')
    op.drop_table('instruments')
