"""
Assignment workflow: moves ledger quantity between available and assigned.

    active --return (partial)--> partially_returned --return--> returned
    active | partially_returned --write-off--> lost | damaged

The assignment record and its ledger row are both locked before any
quantity check, so two returns on the same assignment cannot both succeed.
"""
import logging
from datetime import date

from app.models import ActivityLog, Assignment, Personnel
from app.services.exceptions import (
    Forbidden, InsufficientQuantity, InvalidStateTransition, NotFound, ValidationError
)
from app.services.ledger import InventoryLedger

logger = logging.getLogger(__name__)

WRITE_OFF_STATUSES = ('lost', 'damaged')
METADATA_FIELDS = ('assignment_date', 'expected_return_date', 'notes')


def get_assignment(session, assignment_id, lock=False):
    query = session.query(Assignment).filter_by(id=assignment_id)
    if lock:
        query = query.with_for_update().populate_existing()
    assignment = query.one_or_none()
    if assignment is None:
        raise NotFound('Assignment not found')
    return assignment


def create_assignment(session, actor, asset_id, personnel_id, quantity=1,
                      assignment_date=None, expected_return_date=None, notes=None):
    if quantity is None or quantity <= 0:
        raise ValidationError('Quantity must be greater than 0')

    ledger = InventoryLedger(session, actor_id=actor.id)
    row = ledger.get_row_by_id(asset_id, lock=True)
    if not actor.has_base_access(row.base_id):
        raise Forbidden('You can only assign assets from your base')

    personnel = session.get(Personnel, personnel_id)
    if personnel is None:
        raise ValidationError('Invalid personnel ID')
    if personnel.base_id != row.base_id:
        raise ValidationError('Personnel must belong to the same base as the asset')

    if row.available_quantity < quantity:
        raise InsufficientQuantity(available=row.available_quantity, requested=quantity)

    assignment = Assignment(
        asset_id=row.id,
        personnel_id=personnel.id,
        base_id=row.base_id,
        assigned_by=actor.id,
        quantity=quantity,
        expected_return_date=expected_return_date,
        notes=notes,
        status='active'
    )
    if assignment_date:
        assignment.assignment_date = assignment_date
    session.add(assignment)
    session.flush()

    ledger.apply_delta(
        row,
        delta_available=-quantity,
        delta_assigned=quantity,
        movement_type='ASSIGN',
        reference_type='assignment',
        reference_id=assignment.id
    )

    ActivityLog.log_activity(session, actor, 'ASSIGNMENT_CREATED', 'assignments', assignment.id, new_data={
        'asset_id': row.id,
        'personnel_id': personnel.id,
        'quantity': quantity
    })
    logger.info(f'ASSIGNMENT_CREATED assignment_id={assignment.id} user_id={actor.id} '
                f'asset_id={row.id} personnel_id={personnel.id} quantity={quantity}')
    return assignment


def _locked_open_assignment(session, actor, assignment_id, action):
    assignment = get_assignment(session, assignment_id, lock=True)
    if not actor.has_base_access(assignment.base_id):
        raise Forbidden('You can only manage assignments at your base')
    if not assignment.is_open:
        raise InvalidStateTransition('assignment', assignment.status, action)
    return assignment


def return_assignment(session, actor, assignment_id, return_quantity=None, return_date=None, notes=None):
    """Return all or part of what is still outstanding"""
    assignment = _locked_open_assignment(session, actor, assignment_id, 'return')

    outstanding = assignment.outstanding_quantity
    if return_quantity is None:
        return_quantity = outstanding
    if return_quantity <= 0:
        raise ValidationError('Return quantity must be greater than 0')
    if return_quantity > outstanding:
        raise ValidationError(f'Return quantity ({return_quantity}) exceeds outstanding quantity ({outstanding})')

    ledger = InventoryLedger(session, actor_id=actor.id)
    row = ledger.get_row_by_id(assignment.asset_id, lock=True)
    ledger.apply_delta(
        row,
        delta_available=return_quantity,
        delta_assigned=-return_quantity,
        movement_type='RETURN',
        reference_type='assignment',
        reference_id=assignment.id
    )

    assignment.returned_quantity += return_quantity
    if assignment.outstanding_quantity == 0:
        assignment.status = 'returned'
        assignment.return_date = return_date or date.today()
    else:
        assignment.status = 'partially_returned'
    if notes:
        assignment.notes = notes
    session.flush()

    ActivityLog.log_activity(session, actor, 'ASSIGNMENT_RETURNED', 'assignments', assignment.id, new_data={
        'returned': return_quantity,
        'status': assignment.status
    })
    logger.info(f'ASSIGNMENT_RETURNED assignment_id={assignment.id} user_id={actor.id} '
                f'quantity={return_quantity} status={assignment.status}')
    return assignment


def write_off_assignment(session, actor, assignment_id, status, notes=None):
    """Outstanding quantity was lost or damaged; it leaves the ledger entirely"""
    if not (actor.is_admin() or actor.is_base_commander()):
        raise Forbidden('Only administrators and base commanders can write off assignments')
    if status not in WRITE_OFF_STATUSES:
        raise ValidationError('Status must be lost or damaged')

    assignment = _locked_open_assignment(session, actor, assignment_id, 'write off')
    outstanding = assignment.outstanding_quantity

    ledger = InventoryLedger(session, actor_id=actor.id)
    row = ledger.get_row_by_id(assignment.asset_id, lock=True)
    ledger.apply_delta(
        row,
        delta_total=-outstanding,
        delta_assigned=-outstanding,
        movement_type='WRITE_OFF',
        reference_type='assignment',
        reference_id=assignment.id
    )

    assignment.written_off_quantity += outstanding
    assignment.status = status
    assignment.return_date = date.today()
    if notes:
        assignment.notes = notes
    session.flush()

    ActivityLog.log_activity(session, actor, 'ASSIGNMENT_WRITTEN_OFF', 'assignments', assignment.id, new_data={
        'quantity': outstanding,
        'status': status
    })
    logger.info(f'ASSIGNMENT_WRITTEN_OFF assignment_id={assignment.id} user_id={actor.id} '
                f'quantity={outstanding} status={status}')
    return assignment


def update_assignment(session, actor, assignment_id, changes):
    assignment = get_assignment(session, assignment_id, lock=True)
    if not actor.has_base_access(assignment.base_id):
        raise Forbidden('You can only manage assignments at your base')

    changed = assignment.apply_changes(changes, METADATA_FIELDS)
    session.flush()

    ActivityLog.log_activity(session, actor, 'ASSIGNMENT_UPDATED', 'assignments', assignment.id, new_data=changed)
    logger.info(f'ASSIGNMENT_UPDATED assignment_id={assignment.id} user_id={actor.id}')
    return assignment


def delete_assignment(session, actor, assignment_id):
    """Remove an assignment, handing any outstanding quantity back to available"""
    if not (actor.is_admin() or actor.is_base_commander()):
        raise Forbidden('Only administrators and base commanders can delete assignments')

    assignment = get_assignment(session, assignment_id, lock=True)
    if not actor.has_base_access(assignment.base_id):
        raise Forbidden('You can only manage assignments at your base')

    outstanding = assignment.outstanding_quantity if assignment.is_open else 0
    if outstanding:
        ledger = InventoryLedger(session, actor_id=actor.id)
        row = ledger.get_row_by_id(assignment.asset_id, lock=True)
        ledger.apply_delta(
            row,
            delta_available=outstanding,
            delta_assigned=-outstanding,
            movement_type='RETURN',
            reference_type='assignment',
            reference_id=assignment.id
        )

    ActivityLog.log_activity(session, actor, 'ASSIGNMENT_DELETED', 'assignments', assignment.id, old_data={
        'asset_id': assignment.asset_id,
        'status': assignment.status,
        'restored': outstanding
    })
    session.delete(assignment)
    session.flush()
    logger.info(f'ASSIGNMENT_DELETED assignment_id={assignment_id} user_id={actor.id} restored={outstanding}')
