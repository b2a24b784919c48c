from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from sqlalchemy import or_
from app import db
from app.models import Transfer
from app.forms import TransferForm, TransferRejectForm
from app.services import transfers as transfer_service
from app.services.exceptions import Forbidden
from app.services.ledger import unit_of_work
from app.utils.decorators import admin_required, role_required
from app.utils.form_helpers import validate_json
from app.utils.pagination_helpers import paginated_response
from app.utils.rate_limit_helpers import api_write_limit

bp = Blueprint('api_transfers', __name__)


def get_visible_transfer(id):
    transfer = transfer_service.get_transfer(db.session, id)
    if not current_user.is_admin() and not transfer.involves_base(current_user.base_id):
        raise Forbidden('You can only access transfers involving your base')
    return transfer


@bp.route('/')
@login_required
def api_list():
    """Transfers, newest first; non-admins see those touching their base"""
    query = Transfer.query

    if not current_user.is_admin():
        query = query.filter(or_(
            Transfer.from_base_id == current_user.base_id,
            Transfer.to_base_id == current_user.base_id
        ))

    for arg in ('from_base_id', 'to_base_id', 'asset_type_id'):
        value = request.args.get(arg, type=int)
        if value:
            query = query.filter(getattr(Transfer, arg) == value)
    status = request.args.get('status')
    if status:
        query = query.filter(Transfer.status == status)

    query = query.options(
        db.joinedload(Transfer.from_base),
        db.joinedload(Transfer.to_base),
        db.joinedload(Transfer.asset_type)
    ).order_by(Transfer.created_at.desc(), Transfer.id.desc())
    return jsonify(paginated_response(query))


@bp.route('/<int:id>')
@login_required
def api_get(id):
    return jsonify({'success': True, 'data': get_visible_transfer(id).to_dict()})


@bp.route('/', methods=['POST'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander', 'logistics_officer')
def api_create():
    form = validate_json(TransferForm)

    with unit_of_work(db.session):
        transfer = transfer_service.create_transfer(
            db.session, current_user,
            from_base_id=form.from_base_id.data,
            to_base_id=form.to_base_id.data,
            asset_type_id=form.asset_type_id.data,
            quantity=form.quantity.data,
            asset_name=(form.asset_name.data or '').strip() or None,
            transfer_date=form.transfer_date.data,
            notes=form.notes.data
        )

    return jsonify({'success': True, 'message': 'Transfer request created', 'data': transfer.to_dict()}), 201


@bp.route('/<int:id>/approve', methods=['PUT'])
@api_write_limit
@login_required
@admin_required
def api_approve(id):
    with unit_of_work(db.session):
        transfer = transfer_service.approve_transfer(db.session, current_user, id)

    return jsonify({'success': True, 'message': 'Transfer approved', 'data': transfer.to_dict()})


@bp.route('/<int:id>/reject', methods=['PUT'])
@api_write_limit
@login_required
@admin_required
def api_reject(id):
    form = validate_json(TransferRejectForm)

    with unit_of_work(db.session):
        transfer = transfer_service.reject_transfer(db.session, current_user, id, notes=form.notes.data)

    return jsonify({'success': True, 'message': 'Transfer rejected', 'data': transfer.to_dict()})


@bp.route('/<int:id>/cancel', methods=['PUT'])
@api_write_limit
@login_required
def api_cancel(id):
    with unit_of_work(db.session):
        transfer = transfer_service.cancel_transfer(db.session, current_user, id)

    return jsonify({'success': True, 'message': 'Transfer cancelled', 'data': transfer.to_dict()})


@bp.route('/<int:id>/complete', methods=['PUT'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander')
def api_complete(id):
    with unit_of_work(db.session):
        transfer = transfer_service.complete_transfer(db.session, current_user, id)

    return jsonify({'success': True, 'message': 'Transfer completed', 'data': transfer.to_dict()})


@bp.route('/<int:id>', methods=['DELETE'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander')
def api_delete(id):
    with unit_of_work(db.session):
        transfer_service.delete_transfer(db.session, current_user, id)

    return jsonify({'success': True, 'message': 'Transfer deleted'})
