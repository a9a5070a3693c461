"""create_treasury_tables

Revision ID: 20261019_treasury
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_treasury'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create structures, ledger, custody, roll and operation tables."""
    op.create_table(
        'structures',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('underlying', sa.String(20), nullable=True),
        sa.Column('legs', sa.JSON(), nullable=False),
        sa.Column('custody_movements', sa.JSON(), nullable=False, server_default='[]'),
        sa.Column('net_premium', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('assembly_cost', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('expiration', sa.Date(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='DRAFTING'),
        sa.Column('activated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_structures_user_id', 'structures', ['user_id'])
    op.create_index('ix_structures_status', 'structures', ['status'])

    op.create_table(
        'cash_flow_entries',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('type', sa.String(30), nullable=False),
        sa.Column('description', sa.String(255), nullable=False),
        sa.Column('amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('balance', sa.Numeric(18, 2), nullable=False),
        sa.Column('related_structure_id', sa.String(36), nullable=True),
        sa.Column('related_roll_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_cash_flow_entries_user_id', 'cash_flow_entries', ['user_id'])
    op.create_index('ix_cash_flow_entries_type', 'cash_flow_entries', ['type'])
    op.create_index('ix_cash_flow_entries_related_structure_id', 'cash_flow_entries', ['related_structure_id'])

    op.create_table(
        'custody_assets',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('symbol', sa.String(30), nullable=False),
        sa.Column('name', sa.String(120), nullable=True),
        sa.Column('kind', sa.String(20), nullable=False, server_default='STOCK'),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('average_price', sa.Numeric(18, 6), nullable=False, server_default='0'),
        sa.Column('market_price', sa.Numeric(18, 6), nullable=False, server_default='0'),
        sa.Column('guarantee_percent', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('used_as_guarantee', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'symbol', name='uq_custody_assets_user_symbol'),
    )
    op.create_index('ix_custody_assets_user_id', 'custody_assets', ['user_id'])
    op.create_index('ix_custody_assets_symbol', 'custody_assets', ['symbol'])

    op.create_table(
        'roll_records',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('structure_id', sa.String(36), nullable=False),
        sa.Column('original_legs', sa.JSON(), nullable=False),
        sa.Column('new_legs', sa.JSON(), nullable=False),
        sa.Column('roll_cost', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('realized_profit', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('reason', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='EXECUTED'),
        sa.Column('rolled_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_roll_records_user_id', 'roll_records', ['user_id'])
    op.create_index('ix_roll_records_structure_id', 'roll_records', ['structure_id'])

    op.create_table(
        'operations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('structure_id', sa.String(36), nullable=True),
        sa.Column('kind', sa.String(30), nullable=False),
        sa.Column('symbol', sa.String(30), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(18, 6), nullable=False),
        sa.Column('result', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='OPEN'),
        sa.Column('entry_date', sa.Date(), nullable=False),
        sa.Column('exit_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_operations_user_id', 'operations', ['user_id'])
    op.create_index('ix_operations_structure_id', 'operations', ['structure_id'])


def downgrade() -> None:
    """Drop all treasury tables."""
    op.drop_index('ix_operations_structure_id', 'operations')
    op.drop_index('ix_operations_user_id', 'operations')
    op.drop_table('operations')

    op.drop_index('ix_roll_records_structure_id', 'roll_records')
    op.drop_index('ix_roll_records_user_id', 'roll_records')
    op.drop_table('roll_records')

    op.drop_index('ix_custody_assets_symbol', 'custody_assets')
    op.drop_index('ix_custody_assets_user_id', 'custody_assets')
    op.drop_table('custody_assets')

    op.drop_index('ix_cash_flow_entries_related_structure_id', 'cash_flow_entries')
    op.drop_index('ix_cash_flow_entries_type', 'cash_flow_entries')
    op.drop_index('ix_cash_flow_entries_user_id', 'cash_flow_entries')
    op.drop_table('cash_flow_entries')

    op.drop_index('ix_structures_status', 'structures')
    op.drop_index('ix_structures_user_id', 'structures')
    op.drop_table('structures')
