from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from app import db
from app.models import InventoryRow, LedgerMovement
from app.forms import AssetForm, AssetUpdateForm
from app.services import assets as asset_service
from app.services.ledger import InventoryLedger, unit_of_work
from app.utils.decorators import admin_required, require_base_access, role_required
from app.utils.form_helpers import provided_data, validate_json
from app.utils.pagination_helpers import paginated_response
from app.utils.query_helpers import get_user_base_query
from app.utils.rate_limit_helpers import api_write_limit

bp = Blueprint('api_assets', __name__)


def get_row_or_404(id):
    row = InventoryLedger(db.session).get_row_by_id(id)
    require_base_access(current_user, row.base_id, 'You can only access assets of your base')
    return row


@bp.route('/')
@login_required
def api_list():
    """Ledger rows with optional filters, scoped to the user's base"""
    query = get_user_base_query(InventoryRow)

    asset_type_id = request.args.get('asset_type_id', type=int)
    if asset_type_id:
        query = query.filter(InventoryRow.asset_type_id == asset_type_id)
    status = request.args.get('status')
    if status:
        query = query.filter(InventoryRow.status == status)

    query = query.options(
        db.joinedload(InventoryRow.asset_type),
        db.joinedload(InventoryRow.base)
    ).order_by(InventoryRow.name, InventoryRow.id)
    return jsonify(paginated_response(query))


@bp.route('/<int:id>')
@login_required
def api_get(id):
    return jsonify({'success': True, 'data': get_row_or_404(id).to_dict()})


@bp.route('/<int:id>/movements')
@login_required
def api_movements(id):
    """Ledger history of one row, newest first"""
    row = get_row_or_404(id)
    query = LedgerMovement.query.filter_by(inventory_row_id=row.id).order_by(
        LedgerMovement.movement_date.desc(),
        LedgerMovement.id.desc()
    )
    return jsonify(paginated_response(query))


@bp.route('/', methods=['POST'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander')
def api_create():
    form = validate_json(AssetForm)

    with unit_of_work(db.session):
        row = asset_service.create_row(
            db.session, current_user,
            asset_type_id=form.asset_type_id.data,
            base_id=form.base_id.data,
            name=form.name.data.strip(),
            quantity=form.quantity.data,
            available_quantity=form.available_quantity.data,
            assigned_quantity=form.assigned_quantity.data or 0,
            description=form.description.data
        )

    return jsonify({'success': True, 'message': 'Asset created', 'data': row.to_dict()}), 201


@bp.route('/<int:id>', methods=['PUT'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander')
def api_update(id):
    form = validate_json(AssetUpdateForm)
    changes = provided_data(form)

    with unit_of_work(db.session):
        row = asset_service.update_row(db.session, current_user, id, changes)

    return jsonify({'success': True, 'message': 'Asset updated', 'data': row.to_dict()})


@bp.route('/<int:id>', methods=['DELETE'])
@api_write_limit
@login_required
@admin_required
def api_delete(id):
    with unit_of_work(db.session):
        asset_service.delete_row(db.session, current_user, id)

    return jsonify({'success': True, 'message': 'Asset deleted'})
