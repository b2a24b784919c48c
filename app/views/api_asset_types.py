from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required, current_user
from app import db
from app.models import AssetType, ActivityLog
from app.forms import AssetTypeForm, AssetTypeUpdateForm
from app.services.exceptions import NotFound, ValidationError
from app.services.ledger import unit_of_work
from app.utils.decorators import admin_required
from app.utils.form_helpers import provided, provided_data, validate_json
from app.utils.rate_limit_helpers import api_write_limit

bp = Blueprint('api_asset_types', __name__)

FIELDS = ('name', 'category', 'description', 'unit_of_measure', 'code', 'is_serialized')


def get_asset_type_or_404(id):
    asset_type = db.session.get(AssetType, id)
    if asset_type is None:
        raise NotFound('Asset type not found')
    return asset_type


@bp.route('/')
@login_required
def api_list():
    query = AssetType.query
    category = request.args.get('category')
    if category:
        query = query.filter(AssetType.category == category)
    return jsonify({'success': True, 'data': [t.to_dict() for t in query.order_by(AssetType.name).all()]})


@bp.route('/<int:id>')
@login_required
def api_get(id):
    asset_type = get_asset_type_or_404(id)
    data = asset_type.to_dict()
    data['total_quantity'] = asset_type.total_quantity
    return jsonify({'success': True, 'data': data})


@bp.route('/', methods=['POST'])
@api_write_limit
@login_required
@admin_required
def api_create():
    form = validate_json(AssetTypeForm)

    with unit_of_work(db.session):
        if AssetType.query.filter_by(name=form.name.data).first():
            raise ValidationError('Asset type name already exists')
        asset_type = AssetType(
            name=form.name.data,
            category=form.category.data,
            description=form.description.data,
            unit_of_measure=form.unit_of_measure.data or 'unit',
            code=form.code.data,
            is_serialized=form.is_serialized.data
        )
        db.session.add(asset_type)
        db.session.flush()
        ActivityLog.log_activity(db.session, current_user, 'ASSET_TYPE_CREATED', 'asset_types', asset_type.id,
                                 new_data={'name': asset_type.name})

    current_app.logger.info(f'ASSET_TYPE_CREATED asset_type_id={asset_type.id} user_id={current_user.id}')
    return jsonify({'success': True, 'message': 'Asset type created', 'data': asset_type.to_dict()}), 201


@bp.route('/<int:id>', methods=['PUT'])
@api_write_limit
@login_required
@admin_required
def api_update(id):
    form = validate_json(AssetTypeUpdateForm)

    with unit_of_work(db.session):
        asset_type = get_asset_type_or_404(id)
        if provided(form, 'name') and form.name.data != asset_type.name:
            if AssetType.query.filter_by(name=form.name.data).first():
                raise ValidationError('Asset type name already exists')
        changed = asset_type.apply_changes(provided_data(form), FIELDS)
        ActivityLog.log_activity(db.session, current_user, 'ASSET_TYPE_UPDATED', 'asset_types', asset_type.id, new_data=changed)

    return jsonify({'success': True, 'message': 'Asset type updated', 'data': asset_type.to_dict()})


@bp.route('/<int:id>', methods=['DELETE'])
@api_write_limit
@login_required
@admin_required
def api_delete(id):
    with unit_of_work(db.session):
        asset_type = get_asset_type_or_404(id)
        if asset_type.inventory_rows.count():
            raise ValidationError('Cannot delete asset type that is still held in inventory')
        ActivityLog.log_activity(db.session, current_user, 'ASSET_TYPE_DELETED', 'asset_types', asset_type.id,
                                 old_data={'name': asset_type.name})
        db.session.delete(asset_type)

    current_app.logger.info(f'ASSET_TYPE_DELETED asset_type_id={id} user_id={current_user.id}')
    return jsonify({'success': True, 'message': 'Asset type deleted'})
