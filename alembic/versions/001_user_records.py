"""Create user wager and transaction tables

Revision ID: 001_user_records
Revises:
Create Date: 2025-04-20

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_user_records'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create user_wagers table
    op.create_table(
        'user_wagers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False,
                  comment='Owner identifier resolved from the caller'),
        sa.Column('wager_date', sa.Date(), nullable=True),
        sa.Column('casino_name', sa.Text(), nullable=True),
        sa.Column('game_played', sa.Text(), nullable=True),
        sa.Column('bet_size', sa.Numeric(), nullable=True),
        sa.Column('num_plays', sa.Numeric(), nullable=True),
        sa.Column('ending_balance', sa.Numeric(), nullable=True),
        sa.Column('total_wagered', sa.Numeric(), nullable=True),
        sa.Column('total_won', sa.Numeric(), nullable=True),
        sa.Column('net_result', sa.Numeric(), nullable=True),
        sa.Column('rtp', sa.Numeric(), nullable=True,
                  comment='Return to player ratio'),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'),
                  nullable=False, comment='Upload timestamp'),
        sa.PrimaryKeyConstraint('id'),
        comment='Wager history rows from the Wagers sheet'
    )

    op.create_index('idx_user_wagers_user_id', 'user_wagers', ['user_id'])
    op.create_index('idx_user_wagers_user_date', 'user_wagers', ['user_id', 'wager_date'])

    # Create user_transactions table
    op.create_table(
        'user_transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False,
                  comment='Owner identifier resolved from the caller'),
        sa.Column('transaction_date', sa.Date(), nullable=True),
        sa.Column('casino_name', sa.Text(), nullable=True),
        sa.Column('type', sa.Text(), nullable=True,
                  comment='Transaction type e.g. purchase, redemption'),
        sa.Column('amount_spent', sa.Numeric(), nullable=True),
        sa.Column('redemption_request', sa.Numeric(), nullable=True),
        sa.Column('after_playthrough_value', sa.Numeric(), nullable=True),
        sa.Column('cc_points', sa.Numeric(), nullable=True,
                  comment='Credit card points earned'),
        sa.Column('tax_implications', sa.Numeric(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'),
                  nullable=False, comment='Upload timestamp'),
        sa.PrimaryKeyConstraint('id'),
        comment='Transaction history rows from the Transactions sheet'
    )

    op.create_index('idx_user_transactions_user_id', 'user_transactions', ['user_id'])
    op.create_index('idx_user_transactions_user_date', 'user_transactions',
                    ['user_id', 'transaction_date'])


def downgrade() -> None:
    op.drop_index('idx_user_transactions_user_date', table_name='user_transactions')
    op.drop_index('idx_user_transactions_user_id', table_name='user_transactions')
    op.drop_table('user_transactions')

    op.drop_index('idx_user_wagers_user_date', table_name='user_wagers')
    op.drop_index('idx_user_wagers_user_id', table_name='user_wagers')
    op.drop_table('user_wagers')
