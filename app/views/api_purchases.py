from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from app import db
from app.models import Purchase
from app.forms import PurchaseForm, PurchaseUpdateForm
from app.services import purchases as purchase_service
from app.services.ledger import unit_of_work
from app.utils.decorators import admin_required, require_base_access, role_required
from app.utils.form_helpers import provided, provided_data, validate_json
from app.utils.pagination_helpers import paginated_response
from app.utils.query_helpers import apply_date_range, get_user_base_query
from app.utils.rate_limit_helpers import api_write_limit

bp = Blueprint('api_purchases', __name__)


@bp.route('/')
@login_required
def api_list():
    query = get_user_base_query(Purchase)

    asset_type_id = request.args.get('asset_type_id', type=int)
    if asset_type_id:
        query = query.filter(Purchase.asset_type_id == asset_type_id)
    status = request.args.get('status')
    if status:
        query = query.filter(Purchase.status == status)
    query = apply_date_range(query, Purchase.purchase_date)

    query = query.options(
        db.joinedload(Purchase.asset_type),
        db.joinedload(Purchase.base)
    ).order_by(Purchase.purchase_date.desc(), Purchase.id.desc())
    return jsonify(paginated_response(query))


@bp.route('/<int:id>')
@login_required
def api_get(id):
    purchase = purchase_service.get_purchase(db.session, id)
    require_base_access(current_user, purchase.base_id, 'You can only access purchases of your base')
    return jsonify({'success': True, 'data': purchase.to_dict()})


@bp.route('/', methods=['POST'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander', 'logistics_officer')
def api_create():
    """Record a purchase; admins and commanders approve it immediately unless auto_approve is false"""
    form = validate_json(PurchaseForm)
    auto_approve = form.auto_approve.data if provided(form, 'auto_approve') else True

    with unit_of_work(db.session):
        purchase = purchase_service.create_purchase(
            db.session, current_user,
            asset_type_id=form.asset_type_id.data,
            base_id=form.base_id.data,
            quantity=form.quantity.data,
            unit_cost=form.unit_cost.data,
            asset_name=(form.asset_name.data or '').strip() or None,
            supplier=form.supplier.data,
            purchase_date=form.purchase_date.data,
            notes=form.notes.data,
            auto_approve=auto_approve
        )

    message = 'Purchase recorded and approved' if purchase.status == 'approved' else 'Purchase recorded'
    return jsonify({'success': True, 'message': message, 'data': purchase.to_dict()}), 201


@bp.route('/<int:id>/approve', methods=['PUT'])
@api_write_limit
@login_required
@admin_required
def api_approve(id):
    with unit_of_work(db.session):
        purchase = purchase_service.approve_purchase(db.session, current_user, id)

    return jsonify({'success': True, 'message': 'Purchase approved', 'data': purchase.to_dict()})


@bp.route('/<int:id>/cancel', methods=['PUT'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander')
def api_cancel(id):
    with unit_of_work(db.session):
        purchase = purchase_service.cancel_purchase(db.session, current_user, id)

    return jsonify({'success': True, 'message': 'Purchase cancelled', 'data': purchase.to_dict()})


@bp.route('/<int:id>', methods=['PUT'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander')
def api_update(id):
    form = validate_json(PurchaseUpdateForm)

    with unit_of_work(db.session):
        purchase = purchase_service.update_purchase(db.session, current_user, id, provided_data(form))

    return jsonify({'success': True, 'message': 'Purchase updated', 'data': purchase.to_dict()})


@bp.route('/<int:id>', methods=['DELETE'])
@api_write_limit
@login_required
@admin_required
def api_delete(id):
    with unit_of_work(db.session):
        purchase_service.delete_purchase(db.session, current_user, id)

    return jsonify({'success': True, 'message': 'Purchase deleted'})
