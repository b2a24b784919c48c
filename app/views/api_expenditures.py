from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from app import db
from app.models import Expenditure
from app.forms import ExpenditureForm, ExpenditureUpdateForm
from app.services import expenditures as expenditure_service
from app.services.exceptions import ValidationError
from app.services.ledger import unit_of_work
from app.utils.decorators import admin_required, require_base_access, role_required
from app.utils.form_helpers import json_formdata, provided_data, validate_json
from app.utils.pagination_helpers import paginated_response
from app.utils.query_helpers import apply_date_range, get_user_base_query
from app.utils.rate_limit_helpers import api_write_limit

bp = Blueprint('api_expenditures', __name__)


@bp.route('/')
@login_required
def api_list():
    query = get_user_base_query(Expenditure)

    asset_type_id = request.args.get('asset_type_id', type=int)
    if asset_type_id:
        query = query.filter(Expenditure.asset_type_id == asset_type_id)
    query = apply_date_range(query, Expenditure.expenditure_date)

    query = query.options(
        db.joinedload(Expenditure.asset_type),
        db.joinedload(Expenditure.base)
    ).order_by(Expenditure.expenditure_date.desc(), Expenditure.id.desc())
    return jsonify(paginated_response(query))


@bp.route('/<int:id>')
@login_required
def api_get(id):
    expenditure = expenditure_service.get_expenditure(db.session, id)
    require_base_access(current_user, expenditure.base_id, 'You can only access expenditures of your base')
    return jsonify({'success': True, 'data': expenditure.to_dict()})


@bp.route('/', methods=['POST'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander', 'logistics_officer')
def api_create():
    """Expend stock, drawing from the rows with the most available first"""
    form = validate_json(ExpenditureForm)

    with unit_of_work(db.session):
        expenditure = expenditure_service.create_expenditure(
            db.session, current_user,
            asset_type_id=form.asset_type_id.data,
            base_id=form.base_id.data,
            quantity=form.quantity.data,
            reason=form.reason.data.strip(),
            expenditure_date=form.expenditure_date.data,
            notes=form.notes.data
        )

    return jsonify({'success': True, 'message': 'Expenditure recorded', 'data': expenditure.to_dict()}), 201


@bp.route('/<int:id>', methods=['PUT'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander')
def api_update(id):
    if 'quantity' in json_formdata():
        raise ValidationError('Expenditure quantity cannot be changed after creation')
    form = validate_json(ExpenditureUpdateForm)

    with unit_of_work(db.session):
        expenditure = expenditure_service.update_expenditure(db.session, current_user, id, provided_data(form))

    return jsonify({'success': True, 'message': 'Expenditure updated', 'data': expenditure.to_dict()})


@bp.route('/<int:id>', methods=['DELETE'])
@api_write_limit
@login_required
@admin_required
def api_delete(id):
    with unit_of_work(db.session):
        expenditure_service.delete_expenditure(db.session, current_user, id)

    return jsonify({'success': True, 'message': 'Expenditure deleted'})
