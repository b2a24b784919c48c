"""
Inventory ledger - the single source of truth for asset quantities.

Every workflow changes stock only through ``InventoryLedger.apply_delta``,
which enforces

    quantity >= 0, available_quantity >= 0, assigned_quantity >= 0
    available_quantity + assigned_quantity <= quantity

and records a ``LedgerMovement`` for the change. Reads that precede a write
take a row lock (``SELECT ... FOR UPDATE``) so concurrent requests on the
same row serialize; the ``version`` column on ``InventoryRow`` catches any
writer that slipped past without the lock.

The ledger never commits. Callers wrap a workflow step in
``unit_of_work(session)`` so all of its mutations land together or not at all.
"""
import logging
from contextlib import contextmanager

from app.models import InventoryRow, LedgerMovement
from app.services.exceptions import InsufficientQuantity, InvariantViolation, NotFound

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(session):
    """Commit on success, roll back on any exception"""
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


class InventoryLedger:
    """Read-modify-write access to ledger rows within one session"""

    def __init__(self, session, actor_id=None):
        self.session = session
        self.actor_id = actor_id

    def _query(self, lock):
        query = self.session.query(InventoryRow)
        if lock:
            query = query.with_for_update().populate_existing()
        return query

    def get_row(self, base_id, asset_type_id, name, lock=False):
        """Row for (asset type, name) at a base, or None"""
        return self._query(lock).filter_by(
            base_id=base_id,
            asset_type_id=asset_type_id,
            name=name
        ).one_or_none()

    def get_row_by_id(self, row_id, lock=False):
        row = self._query(lock).filter_by(id=row_id).one_or_none()
        if row is None:
            raise NotFound('Asset not found')
        return row

    def rows_for(self, base_id, asset_type_id, lock=False):
        """All rows of an asset type at a base, largest available first"""
        return self._query(lock).filter_by(
            base_id=base_id,
            asset_type_id=asset_type_id
        ).order_by(
            InventoryRow.available_quantity.desc(),
            InventoryRow.id.asc()
        ).all()

    def total_available(self, rows):
        return sum(row.available_quantity for row in rows)

    def get_or_create_row(self, base_id, asset_type_id, name):
        """Locked existing row, or a new empty row added to the session"""
        row = self.get_row(base_id, asset_type_id, name, lock=True)
        if row is None:
            row = InventoryRow(
                base_id=base_id,
                asset_type_id=asset_type_id,
                name=name,
                quantity=0,
                available_quantity=0,
                assigned_quantity=0,
                status='retired'
            )
            self.session.add(row)
            self.session.flush()
            logger.info(f'LEDGER_ROW_CREATED asset_id={row.id} base_id={base_id} asset_type_id={asset_type_id}')
        return row

    def check_counters(self, quantity, available, assigned):
        """Raise unless the three counters form a valid ledger state"""
        if available < 0:
            raise InvariantViolation('Available quantity cannot be negative')
        if quantity < 0 or assigned < 0:
            raise InvariantViolation('Quantity counters cannot be negative')
        if available + assigned > quantity:
            raise InvariantViolation(
                f'Available ({available}) plus assigned ({assigned}) cannot exceed total quantity ({quantity})'
            )

    def apply_delta(self, row, delta_total=0, delta_available=0, delta_assigned=0,
                    movement_type='ADJUSTMENT', reference_type=None, reference_id=None):
        """Apply counter deltas to a row after validating the resulting state"""
        new_total = row.quantity + delta_total
        new_available = row.available_quantity + delta_available
        new_assigned = row.assigned_quantity + delta_assigned

        if new_available < 0:
            raise InsufficientQuantity(available=row.available_quantity, requested=-delta_available)
        self.check_counters(new_total, new_available, new_assigned)

        row.quantity = new_total
        row.available_quantity = new_available
        row.assigned_quantity = new_assigned
        row.status = row.derive_status()

        self.session.add(LedgerMovement(
            inventory_row_id=row.id,
            base_id=row.base_id,
            asset_type_id=row.asset_type_id,
            movement_type=movement_type,
            delta_total=delta_total,
            delta_available=delta_available,
            delta_assigned=delta_assigned,
            reference_type=reference_type,
            reference_id=reference_id,
            actor_id=self.actor_id
        ))
        self.session.flush()

        logger.debug(
            f'LEDGER_DELTA asset_id={row.id} type={movement_type} '
            f'total={delta_total:+d} available={delta_available:+d} assigned={delta_assigned:+d}'
        )
        return row
