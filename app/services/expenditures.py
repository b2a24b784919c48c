"""
Expenditure workflow: consumes stock of an asset type at a base.

Depletion is greedy, largest available row first: each row gives up
``min(remaining, available_quantity)`` from both its available and total
counters until the requested quantity is covered. All candidate rows are
locked up front and the whole walk runs in the caller's unit of work, so a
failure leaves every row untouched.
"""
import logging

from app.models import ActivityLog, AssetType, Base, Expenditure
from app.services.exceptions import Forbidden, InsufficientQuantity, NotFound, ValidationError
from app.services.ledger import InventoryLedger

logger = logging.getLogger(__name__)

METADATA_FIELDS = ('reason', 'notes', 'expenditure_date')


def get_expenditure(session, expenditure_id):
    expenditure = session.get(Expenditure, expenditure_id)
    if expenditure is None:
        raise NotFound('Expenditure not found')
    return expenditure


def deplete(ledger, base_id, asset_type_id, quantity, reference_id=None):
    """
    Remove ``quantity`` from the available stock of an asset type at a base.

    Returns a list of (row, consumed) pairs in the order rows were drawn.
    """
    rows = ledger.rows_for(base_id, asset_type_id, lock=True)
    if not rows:
        raise NotFound('Base does not have this asset type in inventory')

    total_available = ledger.total_available(rows)
    if total_available < quantity:
        raise InsufficientQuantity(available=total_available, requested=quantity)

    remaining = quantity
    drawn = []
    for row in rows:
        if remaining == 0:
            break
        consumed = min(remaining, row.available_quantity)
        if consumed == 0:
            continue
        ledger.apply_delta(
            row,
            delta_total=-consumed,
            delta_available=-consumed,
            movement_type='EXPENDITURE',
            reference_type='expenditure',
            reference_id=reference_id
        )
        drawn.append((row, consumed))
        remaining -= consumed
    return drawn


def create_expenditure(session, actor, asset_type_id, base_id, quantity, reason,
                       expenditure_date=None, notes=None):
    if quantity is None or quantity <= 0:
        raise ValidationError('Quantity must be greater than 0')
    if not reason:
        raise ValidationError('Reason is required')
    if not actor.has_base_access(base_id):
        raise Forbidden('You can only create expenditures for your base')
    if session.get(Base, base_id) is None:
        raise ValidationError('Invalid base ID')
    if session.get(AssetType, asset_type_id) is None:
        raise ValidationError('Invalid asset type ID')

    expenditure = Expenditure(
        asset_type_id=asset_type_id,
        base_id=base_id,
        quantity=quantity,
        reason=reason,
        notes=notes,
        created_by=actor.id
    )
    if expenditure_date:
        expenditure.expenditure_date = expenditure_date
    session.add(expenditure)
    session.flush()

    ledger = InventoryLedger(session, actor_id=actor.id)
    drawn = deplete(ledger, base_id, asset_type_id, quantity, reference_id=expenditure.id)

    ActivityLog.log_activity(session, actor, 'EXPENDITURE_CREATED', 'expenditures', expenditure.id, new_data={
        'asset_type_id': asset_type_id,
        'base_id': base_id,
        'quantity': quantity,
        'reason': reason,
        'rows': [{'asset_id': row.id, 'consumed': consumed} for row, consumed in drawn]
    })
    logger.info(f'EXPENDITURE_CREATED expenditure_id={expenditure.id} user_id={actor.id} '
                f'base_id={base_id} asset_type_id={asset_type_id} quantity={quantity} rows={len(drawn)}')
    return expenditure


def update_expenditure(session, actor, expenditure_id, changes):
    """Edit descriptive fields; the depleted quantity is fixed once recorded"""
    expenditure = get_expenditure(session, expenditure_id)
    if not actor.has_base_access(expenditure.base_id):
        raise Forbidden('Base commanders can only update expenditures for their base')
    if 'quantity' in changes:
        raise ValidationError('Expenditure quantity cannot be changed after creation')
    if 'reason' in changes and not (changes['reason'] or '').strip():
        raise ValidationError('Reason is required')

    changed = expenditure.apply_changes(changes, METADATA_FIELDS)
    session.flush()

    ActivityLog.log_activity(session, actor, 'EXPENDITURE_UPDATED', 'expenditures', expenditure.id, new_data=changed)
    logger.info(f'EXPENDITURE_UPDATED expenditure_id={expenditure.id} user_id={actor.id}')
    return expenditure


def delete_expenditure(session, actor, expenditure_id):
    """Remove the record; stock already consumed is not credited back"""
    if not actor.is_admin():
        raise Forbidden('Only administrators can delete expenditures')

    expenditure = get_expenditure(session, expenditure_id)
    ActivityLog.log_activity(session, actor, 'EXPENDITURE_DELETED', 'expenditures', expenditure.id,
                             old_data={'quantity': expenditure.quantity, 'reason': expenditure.reason})
    session.delete(expenditure)
    session.flush()
    logger.info(f'EXPENDITURE_DELETED expenditure_id={expenditure_id} user_id={actor.id}')
