"""
Replace-persist sequencer.

Replaces everything an owner has stored with a new pair of batches:

    IDLE -> DELETING_WAGERS -> DELETING_TRANSACTIONS
         -> INSERTING_WAGERS -> INSERTING_TRANSACTIONS -> DONE

Any stage may end the run in FAILED. Stages run in this fixed order, each
exactly once, with no retries and no compensation: a failure after the first
delete leaves the owner's data partially replaced, and the outcome says so.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from pydantic import BaseModel

from services.record_store import RecordStore
from services.row_mapper import TRANSACTIONS_COLLECTION, WAGERS_COLLECTION

logger = logging.getLogger(__name__)


class PersistState(str, Enum):
    """Sequencer states."""
    IDLE = 'idle'
    DELETING_WAGERS = 'deleting_wagers'
    DELETING_TRANSACTIONS = 'deleting_transactions'
    INSERTING_WAGERS = 'inserting_wagers'
    INSERTING_TRANSACTIONS = 'inserting_transactions'
    DONE = 'done'
    FAILED = 'failed'


class PersistStage(str, Enum):
    """Stage names reported on failure."""
    DELETE_WAGERS = 'DeleteWagers'
    DELETE_TRANSACTIONS = 'DeleteTransactions'
    INSERT_WAGERS = 'InsertWagers'
    INSERT_TRANSACTIONS = 'InsertTransactions'


_STAGE_FOR_STATE = {
    PersistState.DELETING_WAGERS: PersistStage.DELETE_WAGERS,
    PersistState.DELETING_TRANSACTIONS: PersistStage.DELETE_TRANSACTIONS,
    PersistState.INSERTING_WAGERS: PersistStage.INSERT_WAGERS,
    PersistState.INSERTING_TRANSACTIONS: PersistStage.INSERT_TRANSACTIONS,
}


@dataclass
class ReplaceOutcome:
    """Result of one sequencer run."""
    state: PersistState = PersistState.IDLE
    failed_stage: Optional[PersistStage] = None
    cause: Optional[BaseException] = None
    wagers_added: int = 0
    transactions_added: int = 0
    history: List[PersistState] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state is PersistState.DONE

    @property
    def data_modified(self) -> bool:
        """True once the owner's stored wagers have been deleted."""
        return PersistState.DELETING_TRANSACTIONS in self.history


class ReplacePersistSequencer:
    """
    Runs delete-then-insert for one owner across both collections.

    The store is expected to raise on failure; any exception from a store
    call ends the run in FAILED with the current stage recorded.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def run(
        self,
        owner_id: str,
        wagers: Sequence[BaseModel],
        transactions: Sequence[BaseModel]
    ) -> ReplaceOutcome:
        """
        Replace the owner's wagers and transactions.

        Returns:
            ReplaceOutcome, in state DONE or FAILED
        """
        outcome = ReplaceOutcome()
        outcome.history.append(PersistState.IDLE)

        steps = [
            (PersistState.DELETING_WAGERS,
             lambda: self.store.delete_all_by_owner(WAGERS_COLLECTION, owner_id)),
            (PersistState.DELETING_TRANSACTIONS,
             lambda: self.store.delete_all_by_owner(TRANSACTIONS_COLLECTION, owner_id)),
            (PersistState.INSERTING_WAGERS,
             lambda: self._insert(WAGERS_COLLECTION, wagers)),
            (PersistState.INSERTING_TRANSACTIONS,
             lambda: self._insert(TRANSACTIONS_COLLECTION, transactions)),
        ]

        for state, action in steps:
            outcome.state = state
            outcome.history.append(state)
            logger.info(f"Owner {owner_id}: {state.value}")

            try:
                action()
            except Exception as e:
                stage = _STAGE_FOR_STATE[state]
                logger.error(f"Owner {owner_id}: stage {stage.value} failed: {e}", exc_info=True)
                if outcome.data_modified:
                    logger.warning(f"Owner {owner_id}: existing records were deleted before the "
                                   f"failure and have not been restored")
                outcome.state = PersistState.FAILED
                outcome.failed_stage = stage
                outcome.cause = e
                outcome.history.append(PersistState.FAILED)
                return outcome

            if state is PersistState.INSERTING_WAGERS:
                outcome.wagers_added = len(wagers)
            elif state is PersistState.INSERTING_TRANSACTIONS:
                outcome.transactions_added = len(transactions)

        outcome.state = PersistState.DONE
        outcome.history.append(PersistState.DONE)
        logger.info(f"Owner {owner_id}: inserted {outcome.wagers_added} wagers and "
                    f"{outcome.transactions_added} transactions")
        return outcome

    def _insert(self, collection: str, records: Sequence[BaseModel]):
        if not records:
            logger.info(f"No records for {collection}, skipping insert")
            return
        self.store.insert_batch(collection, records)
