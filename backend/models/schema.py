"""
SQLAlchemy models for the spreadsheet ingestion system.

This module defines the database schema using SQLAlchemy ORM,
matching the schema defined in Alembic migrations.
"""

from sqlalchemy import Column, Date, Integer, Numeric, String, Text, TIMESTAMP, Index, text
from sqlalchemy.orm import declarative_base

from services.records import OWNER_ID_MAX_LENGTH

Base = declarative_base()


class UserWager(Base):
    """One wager session row uploaded by a user."""

    __tablename__ = 'user_wagers'
    __table_args__ = (
        Index('idx_user_wagers_user_id', 'user_id'),
        Index('idx_user_wagers_user_date', 'user_id', 'wager_date'),
        {'comment': 'Wager history rows from the Wagers sheet'}
    )

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        nullable=False
    )
    user_id = Column(
        String(OWNER_ID_MAX_LENGTH),
        nullable=False,
        comment='Owner identifier resolved from the caller'
    )
    wager_date = Column(Date, nullable=True)
    casino_name = Column(Text, nullable=True)
    game_played = Column(Text, nullable=True)
    bet_size = Column(Numeric, nullable=True)
    num_plays = Column(Numeric, nullable=True)
    ending_balance = Column(Numeric, nullable=True)
    total_wagered = Column(Numeric, nullable=True)
    total_won = Column(Numeric, nullable=True)
    net_result = Column(Numeric, nullable=True)
    rtp = Column(
        Numeric,
        nullable=True,
        comment='Return to player ratio'
    )
    created_at = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False,
        comment='Upload timestamp'
    )

    def __repr__(self):
        return f"<UserWager(id={self.id}, user_id='{self.user_id}', casino='{self.casino_name}')>"


class UserTransaction(Base):
    """One purchase/redemption row uploaded by a user."""

    __tablename__ = 'user_transactions'
    __table_args__ = (
        Index('idx_user_transactions_user_id', 'user_id'),
        Index('idx_user_transactions_user_date', 'user_id', 'transaction_date'),
        {'comment': 'Transaction history rows from the Transactions sheet'}
    )

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        nullable=False
    )
    user_id = Column(
        String(OWNER_ID_MAX_LENGTH),
        nullable=False,
        comment='Owner identifier resolved from the caller'
    )
    transaction_date = Column(Date, nullable=True)
    casino_name = Column(Text, nullable=True)
    type = Column(
        Text,
        nullable=True,
        comment='Transaction type e.g. purchase, redemption'
    )
    amount_spent = Column(Numeric, nullable=True)
    redemption_request = Column(Numeric, nullable=True)
    after_playthrough_value = Column(Numeric, nullable=True)
    cc_points = Column(
        Numeric,
        nullable=True,
        comment='Credit card points earned'
    )
    tax_implications = Column(Numeric, nullable=True)
    created_at = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False,
        comment='Upload timestamp'
    )

    def __repr__(self):
        return f"<UserTransaction(id={self.id}, user_id='{self.user_id}', type='{self.type}')>"
