from flask import Blueprint, current_app, jsonify
from flask_login import login_required, current_user
from app import db
from app.models import Base, ActivityLog
from app.forms import BaseSiteForm
from app.services.exceptions import NotFound, ValidationError
from app.services.ledger import unit_of_work
from app.utils.decorators import admin_required
from app.utils.form_helpers import validate_json
from app.utils.rate_limit_helpers import api_write_limit

bp = Blueprint('api_bases', __name__)


@bp.route('/')
@login_required
def api_list():
    """All bases; every role needs them as transfer destinations"""
    bases = Base.query.order_by(Base.name).all()
    return jsonify({'success': True, 'data': [base.to_dict() for base in bases]})


@bp.route('/<int:id>')
@login_required
def api_get(id):
    base = db.session.get(Base, id)
    if base is None:
        raise NotFound('Base not found')
    return jsonify({'success': True, 'data': base.to_dict()})


@bp.route('/', methods=['POST'])
@api_write_limit
@login_required
@admin_required
def api_create():
    form = validate_json(BaseSiteForm)

    with unit_of_work(db.session):
        if Base.query.filter_by(code=form.code.data).first():
            raise ValidationError('Base code already exists')
        base = Base(name=form.name.data, code=form.code.data, location=form.location.data)
        db.session.add(base)
        db.session.flush()
        ActivityLog.log_activity(db.session, current_user, 'BASE_CREATED', 'bases', base.id, new_data={'code': base.code})

    current_app.logger.info(f'BASE_CREATED base_id={base.id} user_id={current_user.id}')
    return jsonify({'success': True, 'message': 'Base created', 'data': base.to_dict()}), 201
