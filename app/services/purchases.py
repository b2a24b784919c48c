"""
Purchase workflow: pending -> approved (materializes stock) | cancelled.
Approval is irreversible.
"""
import logging
import time
from datetime import datetime
from decimal import Decimal

from app.models import ActivityLog, AssetType, AssetUnit, Base, Purchase
from app.services.exceptions import Forbidden, InvalidStateTransition, NotFound, ValidationError
from app.services.ledger import InventoryLedger

logger = logging.getLogger(__name__)

ELEVATED_ROLES = ('admin', 'base_commander')
EDITABLE_FIELDS = ('quantity', 'unit_cost', 'supplier', 'purchase_date', 'notes')


def get_purchase(session, purchase_id, lock=False):
    query = session.query(Purchase).filter_by(id=purchase_id)
    if lock:
        query = query.with_for_update().populate_existing()
    purchase = query.one_or_none()
    if purchase is None:
        raise NotFound('Purchase not found')
    return purchase


def generate_serial_number(asset_type, index, timestamp=None):
    """<TYPE>-<epoch ms>-<index>"""
    timestamp = timestamp or int(time.time() * 1000)
    return f'{asset_type.serial_prefix}-{timestamp}-{index}'


def materialize_purchase(ledger, purchase):
    """Credit the ledger row and, for serialized types, create the individual units"""
    row = ledger.get_or_create_row(purchase.base_id, purchase.asset_type_id, purchase.asset_name)
    ledger.apply_delta(
        row,
        delta_total=purchase.quantity,
        delta_available=purchase.quantity,
        movement_type='PURCHASE',
        reference_type='purchase',
        reference_id=purchase.id
    )
    purchase.inventory_row_id = row.id

    if purchase.asset_type.is_serialized:
        timestamp = int(time.time() * 1000)
        for index in range(1, purchase.quantity + 1):
            ledger.session.add(AssetUnit(
                inventory_row_id=row.id,
                purchase_id=purchase.id,
                serial_number=generate_serial_number(purchase.asset_type, index, timestamp),
                current_value=purchase.unit_cost
            ))
    return row


def create_purchase(session, actor, asset_type_id, base_id, quantity, unit_cost, asset_name=None,
                    supplier=None, purchase_date=None, notes=None, auto_approve=True):
    """Record a purchase; elevated roles approve it on the spot unless told not to"""
    if quantity is None or quantity <= 0:
        raise ValidationError('Quantity must be greater than 0')
    if unit_cost is None or unit_cost < 0:
        raise ValidationError('Unit cost cannot be negative')
    if not actor.has_base_access(base_id):
        raise Forbidden('You can only create purchases for your base')

    if session.get(Base, base_id) is None:
        raise ValidationError('Invalid base ID')
    asset_type = session.get(AssetType, asset_type_id)
    if asset_type is None:
        raise ValidationError('Invalid asset type ID')

    purchase = Purchase(
        asset_type_id=asset_type_id,
        base_id=base_id,
        asset_name=asset_name or asset_type.name,
        quantity=quantity,
        unit_cost=Decimal(str(unit_cost)),
        supplier=supplier,
        notes=notes,
        status='pending',
        created_by=actor.id
    )
    if purchase_date:
        purchase.purchase_date = purchase_date
    purchase.recalculate_total()
    session.add(purchase)
    session.flush()

    ActivityLog.log_activity(session, actor, 'PURCHASE_CREATED', 'purchases', purchase.id, new_data={
        'asset_type_id': asset_type_id,
        'base_id': base_id,
        'quantity': quantity,
        'total_cost': float(purchase.total_cost)
    })
    logger.info(f'PURCHASE_CREATED purchase_id={purchase.id} user_id={actor.id} quantity={quantity}')

    if auto_approve and actor.role in ELEVATED_ROLES:
        _approve(session, actor, purchase)
    return purchase


def _approve(session, actor, purchase):
    ledger = InventoryLedger(session, actor_id=actor.id)
    purchase.mark_approved(actor.id)
    materialize_purchase(ledger, purchase)
    session.flush()

    ActivityLog.log_activity(session, actor, 'PURCHASE_APPROVED', 'purchases', purchase.id, new_data={
        'inventory_row_id': purchase.inventory_row_id,
        'quantity': purchase.quantity
    })
    logger.info(f'PURCHASE_APPROVED purchase_id={purchase.id} user_id={actor.id} '
                f'asset_id={purchase.inventory_row_id} quantity={purchase.quantity}')
    return purchase


def approve_purchase(session, actor, purchase_id):
    if not actor.is_admin():
        raise Forbidden('Only administrators can approve purchases')

    purchase = get_purchase(session, purchase_id, lock=True)
    if purchase.status != 'pending':
        raise InvalidStateTransition('purchase', purchase.status, 'approve')
    return _approve(session, actor, purchase)


def cancel_purchase(session, actor, purchase_id):
    purchase = get_purchase(session, purchase_id, lock=True)
    if not actor.is_admin() and not (actor.is_base_commander() and actor.base_id == purchase.base_id):
        raise Forbidden('Base commanders can only cancel purchases for their base')
    if purchase.status != 'pending':
        raise InvalidStateTransition('purchase', purchase.status, 'cancel')

    purchase.status = 'cancelled'
    purchase.cancelled_by = actor.id
    purchase.cancelled_at = datetime.utcnow()
    session.flush()

    ActivityLog.log_activity(session, actor, 'PURCHASE_CANCELLED', 'purchases', purchase.id)
    logger.info(f'PURCHASE_CANCELLED purchase_id={purchase.id} user_id={actor.id}')
    return purchase


def update_purchase(session, actor, purchase_id, changes):
    """Edit a purchase that has not been approved yet"""
    purchase = get_purchase(session, purchase_id, lock=True)
    if not actor.has_base_access(purchase.base_id):
        raise Forbidden('Base commanders can only update purchases for their base')
    if purchase.status != 'pending':
        raise InvalidStateTransition('purchase', purchase.status, 'update')

    old_data = {'quantity': purchase.quantity, 'unit_cost': purchase.unit_cost}
    if changes.get('unit_cost') is not None:
        changes = dict(changes, unit_cost=Decimal(str(changes['unit_cost'])))
    changed = purchase.apply_changes(changes, EDITABLE_FIELDS)
    if purchase.quantity <= 0:
        raise ValidationError('Quantity must be greater than 0')
    purchase.recalculate_total()
    session.flush()

    ActivityLog.log_activity(session, actor, 'PURCHASE_UPDATED', 'purchases', purchase.id,
                             old_data=old_data, new_data=changed)
    logger.info(f'PURCHASE_UPDATED purchase_id={purchase.id} user_id={actor.id}')
    return purchase


def delete_purchase(session, actor, purchase_id):
    if not actor.is_admin():
        raise Forbidden('Only administrators can delete purchases')

    purchase = get_purchase(session, purchase_id, lock=True)
    if purchase.status == 'approved':
        raise InvalidStateTransition('purchase', purchase.status, 'delete')

    ActivityLog.log_activity(session, actor, 'PURCHASE_DELETED', 'purchases', purchase.id,
                             old_data={'status': purchase.status, 'quantity': purchase.quantity})
    session.delete(purchase)
    session.flush()
    logger.info(f'PURCHASE_DELETED purchase_id={purchase_id} user_id={actor.id}')
