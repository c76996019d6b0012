"""Create settlement tables.

Revision ID: 20261019_000001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create hierarchy, activity, cash, configuration and history tables."""

    # Partner hierarchy
    op.create_table(
        'partners',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False, comment='1 = system operator ... 6 = store'),
        sa.Column('parent_id', sa.String(64), nullable=True),
        sa.Column('casino_rolling_pct', sa.DECIMAL(7, 4), nullable=True),
        sa.Column('casino_losing_pct', sa.DECIMAL(7, 4), nullable=True),
        sa.Column('slot_rolling_pct', sa.DECIMAL(7, 4), nullable=True),
        sa.Column('slot_losing_pct', sa.DECIMAL(7, 4), nullable=True),
        sa.Column('balance', sa.DECIMAL(20, 2), nullable=False, server_default='0'),
        sa.Column('point_balance', sa.DECIMAL(20, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['parent_id'], ['partners.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_partners_parent', 'partners', ['parent_id'])

    op.create_table(
        'member_accounts',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('referrer_partner_id', sa.String(64), nullable=False),
        sa.Column('casino_rolling_pct', sa.DECIMAL(7, 4), nullable=True, comment='Override; NULL inherits from referrer'),
        sa.Column('casino_losing_pct', sa.DECIMAL(7, 4), nullable=True),
        sa.Column('slot_rolling_pct', sa.DECIMAL(7, 4), nullable=True),
        sa.Column('slot_losing_pct', sa.DECIMAL(7, 4), nullable=True),
        sa.Column('balance', sa.DECIMAL(20, 2), nullable=False, server_default='0'),
        sa.Column('point_balance', sa.DECIMAL(20, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['referrer_partner_id'], ['partners.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_member_accounts_referrer_partner_id', 'member_accounts', ['referrer_partner_id'])

    # Activity
    op.create_table(
        'wager_records',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('account_id', sa.String(64), nullable=False),
        sa.Column('game_category', sa.String(16), nullable=False, server_default='casino'),
        sa.Column('vendor', sa.String(32), nullable=True),
        sa.Column('bet_amount', sa.DECIMAL(20, 2), nullable=False, server_default='0'),
        sa.Column('win_amount', sa.DECIMAL(20, 2), nullable=False, server_default='0'),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['account_id'], ['member_accounts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_wager_records_account_time', 'wager_records', ['account_id', 'occurred_at'])
    op.create_index('ix_wager_records_vendor', 'wager_records', ['vendor'])

    # Cash and points
    op.create_table(
        'cash_events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('account_id', sa.String(64), nullable=True),
        sa.Column('partner_id', sa.String(64), nullable=True),
        sa.Column('counterparty_partner_id', sa.String(64), nullable=True),
        sa.Column('kind', sa.String(32), nullable=False),
        sa.Column('amount', sa.DECIMAL(20, 2), nullable=False),
        sa.Column('status', sa.String(16), nullable=False, server_default='pending'),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('(account_id IS NULL) <> (partner_id IS NULL)', name='ck_cash_events_single_subject'),
        sa.CheckConstraint('amount >= 0', name='ck_cash_events_amount_non_negative'),
        sa.ForeignKeyConstraint(['account_id'], ['member_accounts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['partner_id'], ['partners.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['counterparty_partner_id'], ['partners.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_cash_events_account_time', 'cash_events', ['account_id', 'occurred_at'])
    op.create_index('idx_cash_events_partner_time', 'cash_events', ['partner_id', 'occurred_at'])

    op.create_table(
        'point_events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('account_id', sa.String(64), nullable=False),
        sa.Column('kind', sa.String(16), nullable=False),
        sa.Column('amount', sa.DECIMAL(20, 2), nullable=False),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['account_id'], ['member_accounts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_point_events_account_time', 'point_events', ['account_id', 'occurred_at'])

    # Configuration and history
    op.create_table(
        'padding_cut_settings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner_id', sa.String(64), nullable=False),
        sa.Column('config', sa.JSON(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id'),
    )

    op.create_table(
        'settlement_records',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('partner_id', sa.String(64), nullable=False),
        sa.Column('settlement_period', sa.String(16), nullable=False),
        sa.Column('vendor_filter', sa.String(32), nullable=False, server_default='all'),
        sa.Column('period_start', sa.Date(), nullable=False),
        sa.Column('period_end', sa.Date(), nullable=False),
        sa.Column('date_from', sa.DateTime(timezone=True), nullable=False),
        sa.Column('date_to', sa.DateTime(timezone=True), nullable=False),
        sa.Column('total_bet_amount', sa.DECIMAL(28, 10), nullable=False),
        sa.Column('total_win_amount', sa.DECIMAL(28, 10), nullable=False),
        sa.Column('casino_rolling_commission', sa.DECIMAL(28, 10), nullable=False),
        sa.Column('casino_losing_commission', sa.DECIMAL(28, 10), nullable=False),
        sa.Column('slot_rolling_commission', sa.DECIMAL(28, 10), nullable=False),
        sa.Column('slot_losing_commission', sa.DECIMAL(28, 10), nullable=False),
        sa.Column('rolling_commission', sa.DECIMAL(28, 10), nullable=False),
        sa.Column('losing_commission', sa.DECIMAL(28, 10), nullable=False),
        sa.Column('padding_cut_amount', sa.DECIMAL(28, 10), nullable=False),
        sa.Column('commission_amount', sa.DECIMAL(28, 10), nullable=False),
        sa.Column('padding_config_version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('details', sa.JSON(), nullable=False),
        sa.Column('executed_by', sa.String(64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('partner_id', 'period_start', 'period_end', 'vendor_filter', name='uq_settlement_records_period'),
    )
    op.create_index('idx_settlement_records_partner_created', 'settlement_records', ['partner_id', 'created_at'])


def downgrade() -> None:
    """Drop settlement tables."""
    op.drop_index('idx_settlement_records_partner_created', table_name='settlement_records')
    op.drop_table('settlement_records')
    op.drop_table('padding_cut_settings')
    op.drop_index('idx_point_events_account_time', table_name='point_events')
    op.drop_table('point_events')
    op.drop_index('idx_cash_events_partner_time', table_name='cash_events')
    op.drop_index('idx_cash_events_account_time', table_name='cash_events')
    op.drop_table('cash_events')
    op.drop_index('ix_wager_records_vendor', table_name='wager_records')
    op.drop_index('idx_wager_records_account_time', table_name='wager_records')
    op.drop_table('wager_records')
    op.drop_index('ix_member_accounts_referrer_partner_id', table_name='member_accounts')
    op.drop_table('member_accounts')
    op.drop_index('idx_partners_parent', table_name='partners')
    op.drop_table('partners')
