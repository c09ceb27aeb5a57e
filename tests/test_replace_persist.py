"""
Tests for the replace-persist sequencer.

Stores are in-memory RecordingStore instances from conftest, optionally
configured to fail on one operation.
"""

import pytest
from services.records import TransactionRecord, WagerRecord
from services.replace_persist import (
    PersistStage, PersistState, ReplaceOutcome, ReplacePersistSequencer
)
from services.row_mapper import TRANSACTIONS_COLLECTION, WAGERS_COLLECTION

OWNER = 'owner-1'

WAGERS = [
    WagerRecord(owner_id=OWNER, wager_date='2024-01-01', casino_name='Casino A'),
    WagerRecord(owner_id=OWNER, wager_date='2024-01-02', casino_name='Casino B'),
]
TRANSACTIONS = [
    TransactionRecord(owner_id=OWNER, transaction_date='2024-01-03', casino_name='Casino A'),
]

FULL_ORDER = [
    ('delete', WAGERS_COLLECTION),
    ('delete', TRANSACTIONS_COLLECTION),
    ('insert', WAGERS_COLLECTION),
    ('insert', TRANSACTIONS_COLLECTION),
]


class TestSuccessfulRun:
    """Runs where every store call succeeds."""

    def test_stage_order(self, recording_store):
        outcome = ReplacePersistSequencer(recording_store).run(OWNER, WAGERS, TRANSACTIONS)

        assert recording_store.operations() == FULL_ORDER
        assert outcome.succeeded
        assert outcome.state is PersistState.DONE
        assert outcome.failed_stage is None
        assert outcome.cause is None

    def test_counts(self, recording_store):
        outcome = ReplacePersistSequencer(recording_store).run(OWNER, WAGERS, TRANSACTIONS)

        assert outcome.wagers_added == 2
        assert outcome.transactions_added == 1
        assert recording_store.calls[2] == ('insert', WAGERS_COLLECTION, 2)
        assert recording_store.calls[3] == ('insert', TRANSACTIONS_COLLECTION, 1)

    def test_history(self, recording_store):
        outcome = ReplacePersistSequencer(recording_store).run(OWNER, WAGERS, TRANSACTIONS)

        assert outcome.history == [
            PersistState.IDLE,
            PersistState.DELETING_WAGERS,
            PersistState.DELETING_TRANSACTIONS,
            PersistState.INSERTING_WAGERS,
            PersistState.INSERTING_TRANSACTIONS,
            PersistState.DONE,
        ]

    def test_deletes_use_owner(self, recording_store):
        ReplacePersistSequencer(recording_store).run(OWNER, WAGERS, TRANSACTIONS)

        assert recording_store.calls[0] == ('delete', WAGERS_COLLECTION, OWNER)
        assert recording_store.calls[1] == ('delete', TRANSACTIONS_COLLECTION, OWNER)

    def test_empty_batches_skip_inserts(self, recording_store):
        outcome = ReplacePersistSequencer(recording_store).run(OWNER, [], [])

        assert recording_store.operations() == FULL_ORDER[:2]
        assert outcome.succeeded
        assert outcome.wagers_added == 0
        assert outcome.transactions_added == 0

    def test_empty_transactions_only(self, recording_store):
        outcome = ReplacePersistSequencer(recording_store).run(OWNER, WAGERS, [])

        assert recording_store.operations() == FULL_ORDER[:3]
        assert outcome.wagers_added == 2
        assert outcome.transactions_added == 0

    def test_replaces_previous_rows(self, recording_store):
        sequencer = ReplacePersistSequencer(recording_store)
        sequencer.run(OWNER, WAGERS, TRANSACTIONS)
        sequencer.run(OWNER, WAGERS[:1], [])

        assert len(recording_store.rows[WAGERS_COLLECTION]) == 1
        assert recording_store.rows[TRANSACTIONS_COLLECTION] == []


class TestFailedRun:
    """Runs where one store call raises."""

    @pytest.mark.parametrize('fail_on, stage, calls_made, modified', [
        (('delete', WAGERS_COLLECTION), PersistStage.DELETE_WAGERS, 1, False),
        (('delete', TRANSACTIONS_COLLECTION), PersistStage.DELETE_TRANSACTIONS, 2, True),
        (('insert', WAGERS_COLLECTION), PersistStage.INSERT_WAGERS, 3, True),
        (('insert', TRANSACTIONS_COLLECTION), PersistStage.INSERT_TRANSACTIONS, 4, True),
    ])
    def test_failure_stops_at_stage(self, make_store, fail_on, stage, calls_made, modified):
        store = make_store(fail_on={fail_on})

        outcome = ReplacePersistSequencer(store).run(OWNER, WAGERS, TRANSACTIONS)

        assert not outcome.succeeded
        assert outcome.state is PersistState.FAILED
        assert outcome.failed_stage is stage
        assert isinstance(outcome.cause, RuntimeError)
        assert store.operations() == FULL_ORDER[:calls_made]
        assert outcome.data_modified is modified
        assert outcome.history[-1] is PersistState.FAILED

    def test_delete_wagers_failure_touches_nothing_else(self, make_store):
        store = make_store(fail_on={('delete', WAGERS_COLLECTION)})

        outcome = ReplacePersistSequencer(store).run(OWNER, WAGERS, TRANSACTIONS)

        assert outcome.history == [PersistState.IDLE, PersistState.DELETING_WAGERS, PersistState.FAILED]
        assert outcome.wagers_added == 0

    def test_counts_before_failure_kept(self, make_store):
        store = make_store(fail_on={('insert', TRANSACTIONS_COLLECTION)})

        outcome = ReplacePersistSequencer(store).run(OWNER, WAGERS, TRANSACTIONS)

        assert outcome.wagers_added == 2
        assert outcome.transactions_added == 0

    def test_stage_names(self):
        assert [s.value for s in PersistStage] == [
            'DeleteWagers', 'DeleteTransactions', 'InsertWagers', 'InsertTransactions'
        ]


class TestReplaceOutcome:
    """Test ReplaceOutcome defaults."""

    def test_defaults(self):
        outcome = ReplaceOutcome()

        assert outcome.state is PersistState.IDLE
        assert not outcome.succeeded
        assert not outcome.data_modified
        assert outcome.history == []
