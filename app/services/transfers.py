"""
Transfer workflow: request -> approve (executes the ledger move) | reject.

    pending --approve--> approved --complete--> completed
    pending --reject---> rejected
    pending --cancel---> cancelled

Approval re-checks the source row under lock, so stock that moved since the
request was filed is caught, and the status check happens on the locked
transfer row, so the ledger is moved at most once per transfer.
"""
import logging
import random
import string
import time
from datetime import datetime

from flask import current_app

from app.models import ActivityLog, Base, AssetType, Transfer
from app.services.exceptions import (
    Forbidden, InsufficientQuantity, InvalidStateTransition, NotFound, ValidationError
)
from app.services.ledger import InventoryLedger

logger = logging.getLogger(__name__)


def generate_transfer_number():
    """TRF-<epoch ms>-<9 uppercase alphanumerics>"""
    prefix = current_app.config.get('TRANSFER_NUMBER_PREFIX', 'TRF')
    suffix = ''.join(random.choices(string.ascii_uppercase + string.digits, k=9))
    return f'{prefix}-{int(time.time() * 1000)}-{suffix}'


def get_transfer(session, transfer_id, lock=False):
    query = session.query(Transfer).filter_by(id=transfer_id)
    if lock:
        query = query.with_for_update().populate_existing()
    transfer = query.one_or_none()
    if transfer is None:
        raise NotFound('Transfer not found')
    return transfer


def create_transfer(session, actor, from_base_id, to_base_id, asset_type_id, quantity,
                    asset_name=None, transfer_date=None, notes=None):
    """File a pending transfer; the ledger is not touched yet"""
    if quantity is None or quantity <= 0:
        raise ValidationError('Quantity must be greater than 0')
    if from_base_id == to_base_id:
        raise ValidationError('Source and destination base must be different')

    if not actor.is_admin() and actor.base_id not in (from_base_id, to_base_id):
        raise Forbidden('You can only create transfers involving your base')

    if session.query(Base).filter(Base.id.in_([from_base_id, to_base_id])).count() != 2:
        raise ValidationError('Invalid base IDs')

    asset_type = session.get(AssetType, asset_type_id)
    if asset_type is None:
        raise ValidationError('Invalid asset type ID')
    asset_name = asset_name or asset_type.name

    ledger = InventoryLedger(session, actor_id=actor.id)
    source = ledger.get_row(from_base_id, asset_type_id, asset_name)
    if source is None:
        raise NotFound('Source base does not hold this asset')
    if source.available_quantity < quantity:
        raise InsufficientQuantity(available=source.available_quantity, requested=quantity)

    transfer = Transfer(
        transfer_number=generate_transfer_number(),
        from_base_id=from_base_id,
        to_base_id=to_base_id,
        asset_type_id=asset_type_id,
        asset_name=asset_name,
        quantity=quantity,
        status='pending',
        requested_by=actor.id,
        notes=notes
    )
    if transfer_date:
        transfer.transfer_date = transfer_date
    session.add(transfer)
    session.flush()

    ActivityLog.log_activity(session, actor, 'TRANSFER_REQUESTED', 'transfers', transfer.id, new_data={
        'transfer_number': transfer.transfer_number,
        'from_base_id': from_base_id,
        'to_base_id': to_base_id,
        'asset_type_id': asset_type_id,
        'quantity': quantity
    })
    logger.info(f'TRANSFER_REQUESTED transfer_id={transfer.id} user_id={actor.id} '
                f'from_base_id={from_base_id} to_base_id={to_base_id} quantity={quantity}')
    return transfer


def execute_transfer(ledger, transfer):
    """Move the transfer quantity from the source row to the destination row"""
    source = ledger.get_row(transfer.from_base_id, transfer.asset_type_id, transfer.asset_name, lock=True)
    if source is None:
        raise InsufficientQuantity(available=0, requested=transfer.quantity)
    if source.available_quantity < transfer.quantity:
        raise InsufficientQuantity(available=source.available_quantity, requested=transfer.quantity)

    ledger.apply_delta(
        source,
        delta_total=-transfer.quantity,
        delta_available=-transfer.quantity,
        movement_type='TRANSFER_OUT',
        reference_type='transfer',
        reference_id=transfer.id
    )

    destination = ledger.get_or_create_row(transfer.to_base_id, transfer.asset_type_id, transfer.asset_name)
    ledger.apply_delta(
        destination,
        delta_total=transfer.quantity,
        delta_available=transfer.quantity,
        movement_type='TRANSFER_IN',
        reference_type='transfer',
        reference_id=transfer.id
    )
    return source, destination


def approve_transfer(session, actor, transfer_id):
    """Approve a pending transfer and execute the ledger move"""
    if not actor.is_admin():
        raise Forbidden('Only administrators can approve transfers')

    transfer = get_transfer(session, transfer_id, lock=True)
    if transfer.status != 'pending':
        raise InvalidStateTransition('transfer', transfer.status, 'approve')

    ledger = InventoryLedger(session, actor_id=actor.id)
    execute_transfer(ledger, transfer)
    transfer.mark_approved(actor.id)
    session.flush()

    ActivityLog.log_activity(session, actor, 'TRANSFER_APPROVED', 'transfers', transfer.id, new_data={
        'transfer_number': transfer.transfer_number,
        'quantity': transfer.quantity
    })
    logger.info(f'TRANSFER_APPROVED transfer_id={transfer.id} user_id={actor.id} '
                f'transfer_number={transfer.transfer_number}')
    return transfer


def reject_transfer(session, actor, transfer_id, notes=None):
    if not actor.is_admin():
        raise Forbidden('Only administrators can reject transfers')

    transfer = get_transfer(session, transfer_id, lock=True)
    if transfer.status != 'pending':
        raise InvalidStateTransition('transfer', transfer.status, 'reject')

    transfer.mark_rejected(actor.id, notes)
    session.flush()

    ActivityLog.log_activity(session, actor, 'TRANSFER_REJECTED', 'transfers', transfer.id, new_data={'notes': notes})
    logger.info(f'TRANSFER_REJECTED transfer_id={transfer.id} user_id={actor.id}')
    return transfer


def cancel_transfer(session, actor, transfer_id):
    """Withdraw a pending transfer"""
    transfer = get_transfer(session, transfer_id, lock=True)

    allowed = (
        actor.is_admin()
        or transfer.requested_by == actor.id
        or (actor.is_base_commander() and transfer.involves_base(actor.base_id))
    )
    if not allowed:
        raise Forbidden('You cannot cancel this transfer')
    if transfer.status != 'pending':
        raise InvalidStateTransition('transfer', transfer.status, 'cancel')

    transfer.status = 'cancelled'
    transfer.cancelled_at = datetime.utcnow()
    session.flush()

    ActivityLog.log_activity(session, actor, 'TRANSFER_CANCELLED', 'transfers', transfer.id)
    logger.info(f'TRANSFER_CANCELLED transfer_id={transfer.id} user_id={actor.id}')
    return transfer


def complete_transfer(session, actor, transfer_id):
    """Destination acknowledges receipt of an approved transfer"""
    transfer = get_transfer(session, transfer_id, lock=True)

    if not (actor.is_admin() or (actor.is_base_commander() and actor.base_id == transfer.to_base_id)):
        raise Forbidden('Only the receiving base commander can complete this transfer')
    if transfer.status != 'approved':
        raise InvalidStateTransition('transfer', transfer.status, 'complete')

    transfer.status = 'completed'
    transfer.completed_at = datetime.utcnow()
    session.flush()

    ActivityLog.log_activity(session, actor, 'TRANSFER_COMPLETED', 'transfers', transfer.id)
    logger.info(f'TRANSFER_COMPLETED transfer_id={transfer.id} user_id={actor.id}')
    return transfer


def delete_transfer(session, actor, transfer_id):
    """Admins delete in any status, commanders only non-approved transfers of their base"""
    transfer = get_transfer(session, transfer_id, lock=True)

    if not actor.is_admin():
        if not actor.is_base_commander() or not transfer.involves_base(actor.base_id):
            raise Forbidden('Base commanders can only delete transfers involving their base')
        if transfer.status in ('approved', 'completed'):
            raise InvalidStateTransition('transfer', transfer.status, 'delete')

    ActivityLog.log_activity(session, actor, 'TRANSFER_DELETED', 'transfers', transfer.id, old_data={
        'transfer_number': transfer.transfer_number,
        'status': transfer.status
    })
    session.delete(transfer)
    session.flush()
    logger.info(f'TRANSFER_DELETED transfer_id={transfer_id} user_id={actor.id}')
