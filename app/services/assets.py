"""
Explicit ledger row management: create, correct, delete.

Corrections go through ``InventoryLedger.apply_delta`` as ADJUSTMENT
movements, so the invariant is checked the same way as for any workflow.
"""
import logging

from app.models import ActivityLog, AssetType, AssetUnit, Assignment, Base, LedgerMovement, Purchase
from app.services.exceptions import Forbidden, InvariantViolation, ValidationError
from app.services.ledger import InventoryLedger

logger = logging.getLogger(__name__)

COUNTER_FIELDS = ('quantity', 'available_quantity', 'assigned_quantity')


def outstanding_for_row(session, asset_id):
    """Quantity of the row that open assignments have not returned or written off yet"""
    open_assignments = session.query(Assignment).filter(
        Assignment.asset_id == asset_id,
        Assignment.status.in_(Assignment.OPEN_STATUSES)
    )
    return sum(assignment.outstanding_quantity for assignment in open_assignments)


def create_row(session, actor, asset_type_id, base_id, name, quantity,
               available_quantity=None, assigned_quantity=0, description=None):
    if not actor.has_base_access(base_id):
        raise Forbidden('Base commanders can only create assets for their base')
    if session.get(Base, base_id) is None:
        raise ValidationError('Invalid base ID')
    if session.get(AssetType, asset_type_id) is None:
        raise ValidationError('Invalid asset type ID')

    if available_quantity is None:
        available_quantity = quantity - (assigned_quantity or 0)
    assigned_quantity = assigned_quantity or 0

    ledger = InventoryLedger(session, actor_id=actor.id)
    ledger.check_counters(quantity, available_quantity, assigned_quantity)
    if ledger.get_row(base_id, asset_type_id, name) is not None:
        raise ValidationError('Asset with this name already exists for this type at this base')

    row = ledger.get_or_create_row(base_id, asset_type_id, name)
    row.description = description
    if quantity:
        ledger.apply_delta(
            row,
            delta_total=quantity,
            delta_available=available_quantity,
            delta_assigned=assigned_quantity,
            movement_type='ADJUSTMENT',
            reference_type='asset',
            reference_id=row.id
        )

    ActivityLog.log_activity(session, actor, 'ASSET_CREATED', 'assets', row.id, new_data={
        'name': name,
        'base_id': base_id,
        'quantity': quantity,
        'available_quantity': available_quantity,
        'assigned_quantity': assigned_quantity
    })
    logger.info(f'ASSET_CREATED asset_id={row.id} user_id={actor.id} base_id={base_id} quantity={quantity}')
    return row


def update_row(session, actor, asset_id, changes):
    """Rename or correct the counters of a row; the result must still be a valid ledger state"""
    ledger = InventoryLedger(session, actor_id=actor.id)
    row = ledger.get_row_by_id(asset_id, lock=True)
    if not actor.has_base_access(row.base_id):
        raise Forbidden('Base commanders can only update assets for their base')

    old_data = {field: getattr(row, field) for field in COUNTER_FIELDS}

    if changes.get('name') and changes['name'] != row.name:
        clash = ledger.get_row(row.base_id, row.asset_type_id, changes['name'])
        if clash is not None:
            raise ValidationError('Asset with this name already exists for this type at this base')
        row.name = changes['name']
    if 'description' in changes:
        row.description = changes['description']

    targets = {field: changes[field] for field in COUNTER_FIELDS if changes.get(field) is not None}
    if targets:
        new_total = targets.get('quantity', row.quantity)
        new_available = targets.get('available_quantity', row.available_quantity)
        new_assigned = targets.get('assigned_quantity', row.assigned_quantity)
        ledger.check_counters(new_total, new_available, new_assigned)
        held = outstanding_for_row(session, row.id)
        if new_assigned < held:
            raise InvariantViolation(
                f'Assigned quantity cannot be lower than the {held} held by open assignments'
            )
        ledger.apply_delta(
            row,
            delta_total=new_total - row.quantity,
            delta_available=new_available - row.available_quantity,
            delta_assigned=new_assigned - row.assigned_quantity,
            movement_type='ADJUSTMENT',
            reference_type='asset',
            reference_id=row.id
        )
    session.flush()

    ActivityLog.log_activity(session, actor, 'ASSET_UPDATED', 'assets', row.id, old_data=old_data,
                             new_data={field: getattr(row, field) for field in COUNTER_FIELDS})
    logger.info(f'ASSET_UPDATED asset_id={row.id} user_id={actor.id}')
    return row


def delete_row(session, actor, asset_id):
    """Remove a row that nothing holds on to; its movement history is kept"""
    if not actor.is_admin():
        raise Forbidden('Only administrators can delete assets')

    ledger = InventoryLedger(session, actor_id=actor.id)
    row = ledger.get_row_by_id(asset_id, lock=True)

    assignments = session.query(Assignment).filter_by(asset_id=row.id)
    if assignments.filter(Assignment.status.in_(Assignment.OPEN_STATUSES)).count():
        raise ValidationError('Cannot delete asset with active assignments')
    if assignments.count() or session.query(AssetUnit).filter_by(inventory_row_id=row.id).count():
        raise ValidationError('Asset has assignment or serial number history; set its quantity to 0 instead')

    session.query(LedgerMovement).filter_by(inventory_row_id=row.id).update(
        {LedgerMovement.inventory_row_id: None}, synchronize_session=False
    )
    session.query(Purchase).filter_by(inventory_row_id=row.id).update(
        {Purchase.inventory_row_id: None}, synchronize_session=False
    )

    ActivityLog.log_activity(session, actor, 'ASSET_DELETED', 'assets', row.id, old_data={
        'name': row.name,
        'base_id': row.base_id,
        'quantity': row.quantity
    })
    session.delete(row)
    session.flush()
    logger.info(f'ASSET_DELETED asset_id={asset_id} user_id={actor.id}')
