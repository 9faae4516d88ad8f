"""Initial schema: ledger, wallets, assets, budgets and goals

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

ENTRY_KINDS = ('INCOME', 'EXPENSE')
WALLET_TXN_TYPES = ('DEPOSIT', 'WITHDRAWAL')
ASSET_STATUSES = ('QUITADO', 'EM_ANDAMENTO')
ASSET_CATEGORIES = (
    'IMOVEL', 'VEICULO', 'POUPANCA', 'TESOURO_DIRETO', 'RENDA_FIXA', 'FUNDOS_IMOBILIARIOS',
    'ACOES', 'CRIPTOMOEDAS', 'PREVIDENCIA', 'INVESTIMENTO', 'OUTRO',
)
GOAL_TYPES = ('EMERGENCY_FUND', 'SAVINGS_RATE', 'CUSTOM')


def _enum(values, name):
    return sa.Enum(*values, name=name, native_enum=False)


def upgrade():
    op.create_table(
        'fixed_commitments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('account_id', sa.String(), nullable=False),
        sa.Column('kind', _enum(ENTRY_KINDS, 'entrykind'), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('category_id', sa.String(), nullable=True),
        sa.Column('due_day', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_fixed_commitments_account_id', 'fixed_commitments', ['account_id'])

    op.create_table(
        'ad_hoc_entries',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('account_id', sa.String(), nullable=False),
        sa.Column('kind', _enum(ENTRY_KINDS, 'entrykind'), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('entry_date', sa.Date(), nullable=True),
        sa.Column('month', sa.Integer(), nullable=True),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('category_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_ad_hoc_entries_account_id', 'ad_hoc_entries', ['account_id'])
    op.create_index('ix_ad_hoc_entries_entry_date', 'ad_hoc_entries', ['entry_date'])

    op.create_table(
        'fixed_expense_payments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'fixed_commitment_id', sa.Uuid(),
            sa.ForeignKey('fixed_commitments.id', ondelete='CASCADE'), nullable=False
        ),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('fixed_commitment_id', 'month', 'year', name='uq_fixed_payment_period'),
    )

    op.create_table(
        'wallets',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('account_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('target_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('current_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('periods_total', sa.Integer(), nullable=True),
        sa.Column('monthly_contribution', sa.Numeric(12, 2), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_wallets_account_id', 'wallets', ['account_id'])

    op.create_table(
        'wallet_skipped_months',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('wallet_id', sa.Uuid(), sa.ForeignKey('wallets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('wallet_id', 'month', 'year', name='uq_wallet_skip_period'),
    )

    op.create_table(
        'wallet_transactions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('wallet_id', sa.Uuid(), sa.ForeignKey('wallets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', _enum(WALLET_TXN_TYPES, 'wallettransactiontype'), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'assets',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('account_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('category', _enum(ASSET_CATEGORIES, 'assetcategory'), nullable=False),
        sa.Column('status', _enum(ASSET_STATUSES, 'assetstatus'), nullable=False),
        sa.Column('estimated_value', sa.Numeric(14, 2), nullable=False),
        sa.Column('yield_rate', sa.Numeric(6, 2), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column(
            'wallet_id', sa.Uuid(),
            sa.ForeignKey('wallets.id', ondelete='SET NULL'), nullable=True, unique=True
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_assets_account_id', 'assets', ['account_id'])

    op.create_table(
        'category_budgets',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('account_id', sa.String(), nullable=False),
        sa.Column('category_id', sa.String(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('account_id', 'category_id', 'month', 'year', name='uq_category_budget_period'),
    )
    op.create_index('ix_category_budgets_account_id', 'category_budgets', ['account_id'])

    op.create_table(
        'financial_goals',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('account_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('type', _enum(GOAL_TYPES, 'goaltype'), nullable=False),
        sa.Column('target_value', sa.Numeric(14, 2), nullable=True),
        sa.Column('current_value', sa.Numeric(14, 2), nullable=True),
        sa.Column('deadline', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_financial_goals_account_id', 'financial_goals', ['account_id'])


def downgrade():
    op.drop_index('ix_financial_goals_account_id', table_name='financial_goals')
    op.drop_table('financial_goals')
    op.drop_index('ix_category_budgets_account_id', table_name='category_budgets')
    op.drop_table('category_budgets')
    op.drop_index('ix_assets_account_id', table_name='assets')
    op.drop_table('assets')
    op.drop_table('wallet_transactions')
    op.drop_table('wallet_skipped_months')
    op.drop_index('ix_wallets_account_id', table_name='wallets')
    op.drop_table('wallets')
    op.drop_table('fixed_expense_payments')
    op.drop_index('ix_ad_hoc_entries_entry_date', table_name='ad_hoc_entries')
    op.drop_index('ix_ad_hoc_entries_account_id', table_name='ad_hoc_entries')
    op.drop_table('ad_hoc_entries')
    op.drop_index('ix_fixed_commitments_account_id', table_name='fixed_commitments')
    op.drop_table('fixed_commitments')
