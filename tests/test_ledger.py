"""
Inventory ledger contract: counters never leave a valid state and every
change leaves a movement behind.
"""

import pytest
from sqlalchemy import text
from sqlalchemy.orm.exc import StaleDataError

from app.models import LedgerMovement
from app.services.exceptions import InsufficientQuantity, InvariantViolation
from app.services.ledger import InventoryLedger, unit_of_work


class TestApplyDelta:

    def test_delta_updates_counters_and_records_movement(self, session, seed, make_row, refresh):
        row = make_row(seed.alpha, seed.ammo, 100)

        with unit_of_work(session):
            ledger = InventoryLedger(session, actor_id=seed.admin.id)
            ledger.apply_delta(row, delta_available=-20, delta_assigned=20, movement_type='ASSIGN',
                               reference_type='assignment', reference_id=7)

        row = refresh(row)
        assert (row.quantity, row.available_quantity, row.assigned_quantity) == (100, 80, 20)

        movement = session.query(LedgerMovement).filter_by(movement_type='ASSIGN').one()
        assert movement.inventory_row_id == row.id
        assert movement.delta_available == -20
        assert movement.delta_assigned == 20
        assert movement.reference_id == 7
        assert movement.actor_id == seed.admin.id

    def test_negative_available_raises_insufficient_quantity(self, session, seed, make_row, refresh):
        row = make_row(seed.alpha, seed.ammo, 10)

        with pytest.raises(InsufficientQuantity) as exc_info:
            with unit_of_work(session):
                InventoryLedger(session).apply_delta(row, delta_total=-11, delta_available=-11)

        assert 'Available: 10, Requested: 11' in exc_info.value.message
        row = refresh(row)
        assert (row.quantity, row.available_quantity) == (10, 10)

    def test_available_plus_assigned_above_total_is_rejected(self, session, seed, make_row, refresh):
        row = make_row(seed.alpha, seed.ammo, 10, available=5, assigned=5)

        with pytest.raises(InvariantViolation):
            with unit_of_work(session):
                InventoryLedger(session).apply_delta(row, delta_available=1)

        row = refresh(row)
        assert (row.quantity, row.available_quantity, row.assigned_quantity) == (10, 5, 5)

    def test_negative_total_is_rejected(self, session, seed, make_row):
        row = make_row(seed.alpha, seed.ammo, 10, available=0, assigned=10)

        with pytest.raises(InvariantViolation):
            with unit_of_work(session):
                InventoryLedger(session).apply_delta(row, delta_total=-11, delta_assigned=-11)

    def test_failed_delta_leaves_no_movement(self, session, seed, make_row):
        row = make_row(seed.alpha, seed.ammo, 10)
        before = session.query(LedgerMovement).count()

        with pytest.raises(InsufficientQuantity):
            with unit_of_work(session):
                InventoryLedger(session).apply_delta(row, delta_available=-50, delta_total=-50)

        assert session.query(LedgerMovement).count() == before


class TestRowStatus:

    @pytest.mark.parametrize('quantity, available, assigned, status', [
        (10, 10, 0, 'available'),
        (10, 0, 10, 'assigned'),
        (10, 3, 7, 'available'),
    ])
    def test_status_follows_counters(self, seed, make_row, quantity, available, assigned, status):
        row = make_row(seed.alpha, seed.ammo, quantity, available=available, assigned=assigned)
        assert row.status == status

    def test_row_emptied_is_retired(self, session, seed, make_row, refresh):
        row = make_row(seed.alpha, seed.ammo, 5)

        with unit_of_work(session):
            InventoryLedger(session).apply_delta(row, delta_total=-5, delta_available=-5,
                                                 movement_type='EXPENDITURE')

        assert refresh(row).status == 'retired'


class TestGetOrCreateRow:

    def test_creates_empty_row_once(self, session, seed):
        with unit_of_work(session):
            ledger = InventoryLedger(session)
            first = ledger.get_or_create_row(seed.bravo.id, seed.ammo.id, 'Ammunition')
            second = ledger.get_or_create_row(seed.bravo.id, seed.ammo.id, 'Ammunition')

        assert first.id == second.id
        assert (first.quantity, first.available_quantity, first.assigned_quantity) == (0, 0, 0)
        assert first.status == 'retired'

    def test_rows_for_orders_largest_available_first(self, session, seed, make_row):
        small = make_row(seed.alpha, seed.ammo, 80, name='Lot B')
        large = make_row(seed.alpha, seed.ammo, 100, name='Lot A')

        rows = InventoryLedger(session).rows_for(seed.alpha.id, seed.ammo.id)

        assert [row.id for row in rows] == [large.id, small.id]

    def test_version_increments_on_every_update(self, session, seed, make_row, refresh):
        row = make_row(seed.alpha, seed.ammo, 10)
        version = row.version

        with unit_of_work(session):
            InventoryLedger(session).apply_delta(row, delta_total=1, delta_available=1)

        assert refresh(row).version == version + 1

    def test_stale_version_is_detected(self, session, seed, make_row, refresh):
        row = refresh(make_row(seed.alpha, seed.ammo, 10))
        session.execute(text('UPDATE assets SET version = version + 1 WHERE id = :id'), {'id': row.id})

        row.description = 'edited elsewhere'
        with pytest.raises(StaleDataError):
            session.flush()
        session.rollback()
