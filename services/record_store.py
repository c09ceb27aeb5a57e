"""
Record Store - persistence operations consumed by the ingestion pipeline.

The pipeline only needs two operations per collection: delete everything an
owner has, and insert a batch. Each call is its own unit of work; there is no
transaction spanning both collections.
"""

import logging
from typing import Dict, List, Protocol, Sequence, Type

from pydantic import BaseModel
from sqlalchemy.orm import Session

from backend.models.schema import Base, UserTransaction, UserWager
from services.row_mapper import TRANSACTIONS_COLLECTION, WAGERS_COLLECTION

logger = logging.getLogger(__name__)

BATCH_SIZE = 1000

COLLECTION_MODELS: Dict[str, Type[Base]] = {
    WAGERS_COLLECTION: UserWager,
    TRANSACTIONS_COLLECTION: UserTransaction,
}

DATE_COLUMNS = {
    WAGERS_COLLECTION: UserWager.wager_date,
    TRANSACTIONS_COLLECTION: UserTransaction.transaction_date,
}


class RecordStore(Protocol):
    """Persistence interface; implementations raise on failure."""

    def delete_all_by_owner(self, collection: str, owner_id: str) -> None:
        ...

    def insert_batch(self, collection: str, records: Sequence[BaseModel]) -> None:
        ...


def _model_for(collection: str) -> Type[Base]:
    try:
        return COLLECTION_MODELS[collection]
    except KeyError:
        raise ValueError(f"Unknown collection: {collection}")


def record_to_row(record: BaseModel) -> Dict:
    """Convert a record to column values; owner_id is stored as user_id."""
    values = record.model_dump()
    values['user_id'] = values.pop('owner_id')
    return values


class SqlAlchemyRecordStore:
    """
    RecordStore backed by a SQLAlchemy session.

    Every operation commits on success and rolls back before re-raising on
    failure, so a failed stage never leaves a half-open transaction behind.
    """

    def __init__(self, db_session: Session, batch_size: int = BATCH_SIZE):
        self.session = db_session
        self.batch_size = batch_size

    def delete_all_by_owner(self, collection: str, owner_id: str) -> None:
        model = _model_for(collection)
        try:
            deleted = self.session.query(model)\
                .filter(model.user_id == owner_id)\
                .delete(synchronize_session=False)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"Deleted {deleted} rows from {collection} for user {owner_id}")

    def insert_batch(self, collection: str, records: Sequence[BaseModel]) -> None:
        model = _model_for(collection)
        total = len(records)

        try:
            for i in range(0, total, self.batch_size):
                chunk = records[i:i + self.batch_size]
                self.session.bulk_save_objects([model(**record_to_row(r)) for r in chunk])
                self.session.flush()
                logger.debug(f"Inserted batch {i // self.batch_size + 1} "
                             f"({len(chunk)} rows) into {collection}")
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"Inserted {total} rows into {collection}")

    def count_by_owner(self, collection: str, owner_id: str) -> int:
        model = _model_for(collection)
        return self.session.query(model).filter(model.user_id == owner_id).count()

    def list_by_owner(self, collection: str, owner_id: str,
                      offset: int = 0, limit: int = 50) -> List[Base]:
        """Return stored rows for an owner, newest date first."""
        model = _model_for(collection)
        date_column = DATE_COLUMNS[collection]
        return self.session.query(model)\
            .filter(model.user_id == owner_id)\
            .order_by(date_column.desc(), model.id)\
            .offset(offset)\
            .limit(limit)\
            .all()
