from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required, current_user
from sqlalchemy import or_
from app import db
from app.models import Base, Personnel, ActivityLog
from app.forms import PersonnelForm, PersonnelUpdateForm
from app.services.exceptions import NotFound, ValidationError
from app.services.ledger import unit_of_work
from app.utils.decorators import require_base_access, role_required
from app.utils.form_helpers import provided, provided_data, validate_json
from app.utils.pagination_helpers import paginated_response
from app.utils.query_helpers import get_user_base_query
from app.utils.rate_limit_helpers import api_write_limit

bp = Blueprint('api_personnel', __name__)

FIELDS = ('first_name', 'last_name', 'rank', 'base_id', 'email', 'phone', 'department')


def get_personnel_or_404(id):
    personnel = db.session.get(Personnel, id)
    if personnel is None:
        raise NotFound('Personnel not found')
    require_base_access(current_user, personnel.base_id, 'You can only access personnel of your base')
    return personnel


def check_email_free(email, exclude_id=None):
    if not email:
        return
    query = Personnel.query.filter(Personnel.email == email)
    if exclude_id:
        query = query.filter(Personnel.id != exclude_id)
    if query.first():
        raise ValidationError('Email already registered to another service member')


@bp.route('/')
@login_required
def api_list():
    """Personnel list, scoped to the user's base for non-admins"""
    query = get_user_base_query(Personnel)

    rank = request.args.get('rank')
    if rank:
        query = query.filter(Personnel.rank == rank)

    search = request.args.get('search', '').strip()
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(
            Personnel.first_name.ilike(pattern),
            Personnel.last_name.ilike(pattern),
            Personnel.email.ilike(pattern)
        ))

    query = query.options(db.joinedload(Personnel.base)).order_by(Personnel.last_name, Personnel.first_name)
    return jsonify(paginated_response(query))


@bp.route('/<int:id>')
@login_required
def api_get(id):
    return jsonify({'success': True, 'data': get_personnel_or_404(id).to_dict()})


@bp.route('/', methods=['POST'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander')
def api_create():
    form = validate_json(PersonnelForm)
    require_base_access(current_user, form.base_id.data, 'Base commanders can only add personnel to their base')

    with unit_of_work(db.session):
        if db.session.get(Base, form.base_id.data) is None:
            raise ValidationError('Invalid base ID')
        check_email_free(form.email.data)
        personnel = Personnel(**{field: form[field].data for field in FIELDS})
        personnel.email = personnel.email or None
        db.session.add(personnel)
        db.session.flush()
        ActivityLog.log_activity(db.session, current_user, 'PERSONNEL_CREATED', 'personnel', personnel.id,
                                 new_data={'name': personnel.full_name, 'base_id': personnel.base_id})

    current_app.logger.info(f'PERSONNEL_CREATED personnel_id={personnel.id} user_id={current_user.id}')
    return jsonify({'success': True, 'message': 'Personnel created', 'data': personnel.to_dict()}), 201


@bp.route('/<int:id>', methods=['PUT'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander')
def api_update(id):
    form = validate_json(PersonnelUpdateForm)

    with unit_of_work(db.session):
        personnel = get_personnel_or_404(id)
        if provided(form, 'base_id') and form.base_id.data != personnel.base_id:
            require_base_access(current_user, form.base_id.data, 'Base commanders cannot move personnel to another base')
            if personnel.has_outstanding_assignments():
                raise ValidationError('Personnel with outstanding assignments cannot change base')
            if db.session.get(Base, form.base_id.data) is None:
                raise ValidationError('Invalid base ID')
        if provided(form, 'email'):
            check_email_free(form.email.data, exclude_id=personnel.id)

        changed = personnel.apply_changes(provided_data(form), FIELDS)
        ActivityLog.log_activity(db.session, current_user, 'PERSONNEL_UPDATED', 'personnel', personnel.id, new_data=changed)

    return jsonify({'success': True, 'message': 'Personnel updated', 'data': personnel.to_dict()})


@bp.route('/<int:id>', methods=['DELETE'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander')
def api_delete(id):
    with unit_of_work(db.session):
        personnel = get_personnel_or_404(id)
        if personnel.has_outstanding_assignments():
            raise ValidationError('Cannot delete personnel with outstanding assignments')
        if personnel.assignments.count():
            raise ValidationError('Personnel has assignment history and cannot be deleted')
        ActivityLog.log_activity(db.session, current_user, 'PERSONNEL_DELETED', 'personnel', personnel.id,
                                 old_data={'name': personnel.full_name})
        db.session.delete(personnel)

    current_app.logger.info(f'PERSONNEL_DELETED personnel_id={id} user_id={current_user.id}')
    return jsonify({'success': True, 'message': 'Personnel deleted'})
