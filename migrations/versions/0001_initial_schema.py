"""initial schema: accounts, journal, ledger, event log

Revision ID: 0001
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None

account_category = sa.Enum(
    'asset', 'liability', 'equity', 'revenue', 'expense',
    name='account_category_enum',
)
normal_side = sa.Enum('debit', 'credit', name='normal_side_enum')
statement_type = sa.Enum(
    'balance_sheet', 'income_statement', name='statement_type_enum'
)
entry_status = sa.Enum(
    'pending', 'approved', 'rejected',
    name='entry_status_enum', create_constraint=True,
)


def upgrade():
    op.create_table(
        'accounts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('account_number', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('category', account_category, nullable=False),
        sa.Column('subcategory', sa.String(length=100), nullable=True),
        sa.Column('normal_side', normal_side, nullable=False),
        sa.Column('statement_type', statement_type, nullable=False),
        sa.Column('initial_balance', sa.Numeric(14, 2), nullable=False),
        sa.Column('balance', sa.Numeric(14, 2), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_index('ix_accounts_account_number', 'accounts', ['account_number'], unique=True)

    op.create_table(
        'journal_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('status', entry_status, nullable=False),
        sa.Column('created_by', sa.String(length=100), nullable=False),
        sa.Column('total_debit', sa.Numeric(14, 2), nullable=False),
        sa.Column('total_credit', sa.Numeric(14, 2), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('reviewed_by', sa.String(length=100), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('posted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_journal_entries_date', 'journal_entries', ['date'])
    op.create_index('ix_journal_entries_status', 'journal_entries', ['status'])

    op.create_table(
        'journal_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('entry_id', sa.Integer(), nullable=False),
        sa.Column('line_no', sa.Integer(), nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('debit', sa.Numeric(14, 2), nullable=False),
        sa.Column('credit', sa.Numeric(14, 2), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(['entry_id'], ['journal_entries.id']),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('entry_id', 'account_id', name='uq_journal_line_account'),
    )
    op.create_index('ix_journal_lines_entry_id', 'journal_lines', ['entry_id'])
    op.create_index('ix_journal_lines_account_id', 'journal_lines', ['account_id'])

    op.create_table(
        'ledger',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('journal_entry_id', sa.Integer(), nullable=False),
        sa.Column('journal_line_id', sa.Integer(), nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('account_number', sa.String(length=20), nullable=False),
        sa.Column('account_name', sa.String(length=100), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('debit', sa.Numeric(14, 2), nullable=False),
        sa.Column('credit', sa.Numeric(14, 2), nullable=False),
        sa.Column('balance', sa.Numeric(14, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['journal_entry_id'], ['journal_entries.id']),
        sa.ForeignKeyConstraint(['journal_line_id'], ['journal_lines.id']),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('journal_line_id'),
    )
    op.create_index('ix_ledger_journal_entry_id', 'ledger', ['journal_entry_id'])
    op.create_index('ix_ledger_account_id', 'ledger', ['account_id'])

    op.create_table(
        'event_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_type', sa.String(length=100), nullable=False),
        sa.Column('actor', sa.String(length=100), nullable=True),
        sa.Column('details', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_event_log_event_type', 'event_log', ['event_type'])


def downgrade():
    op.drop_index('ix_event_log_event_type', table_name='event_log')
    op.drop_table('event_log')
    op.drop_index('ix_ledger_account_id', table_name='ledger')
    op.drop_index('ix_ledger_journal_entry_id', table_name='ledger')
    op.drop_table('ledger')
    op.drop_index('ix_journal_lines_account_id', table_name='journal_lines')
    op.drop_index('ix_journal_lines_entry_id', table_name='journal_lines')
    op.drop_table('journal_lines')
    op.drop_index('ix_journal_entries_status', table_name='journal_entries')
    op.drop_index('ix_journal_entries_date', table_name='journal_entries')
    op.drop_table('journal_entries')
    op.drop_index('ix_accounts_account_number', table_name='accounts')
    op.drop_table('accounts')
    entry_status.drop(op.get_bind(), checkfirst=True)
    statement_type.drop(op.get_bind(), checkfirst=True)
    normal_side.drop(op.get_bind(), checkfirst=True)
    account_category.drop(op.get_bind(), checkfirst=True)
