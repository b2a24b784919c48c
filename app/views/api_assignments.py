from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from app import db
from app.models import Assignment
from app.forms import AssignmentForm, AssignmentReturnForm, AssignmentWriteOffForm, AssignmentUpdateForm
from app.services import assignments as assignment_service
from app.services.ledger import unit_of_work
from app.utils.decorators import require_base_access, role_required
from app.utils.form_helpers import provided_data, validate_json
from app.utils.pagination_helpers import paginated_response
from app.utils.query_helpers import get_user_base_query
from app.utils.rate_limit_helpers import api_write_limit

bp = Blueprint('api_assignments', __name__)


@bp.route('/')
@login_required
def api_list():
    query = get_user_base_query(Assignment)

    personnel_id = request.args.get('personnel_id', type=int)
    if personnel_id:
        query = query.filter(Assignment.personnel_id == personnel_id)
    status = request.args.get('status')
    if status:
        query = query.filter(Assignment.status == status)

    query = query.options(
        db.joinedload(Assignment.asset),
        db.joinedload(Assignment.personnel)
    ).order_by(Assignment.assignment_date.desc(), Assignment.id.desc())
    return jsonify(paginated_response(query))


@bp.route('/<int:id>')
@login_required
def api_get(id):
    assignment = assignment_service.get_assignment(db.session, id)
    require_base_access(current_user, assignment.base_id, 'You can only access assignments of your base')
    return jsonify({'success': True, 'data': assignment.to_dict()})


@bp.route('/', methods=['POST'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander', 'logistics_officer')
def api_create():
    form = validate_json(AssignmentForm)

    with unit_of_work(db.session):
        assignment = assignment_service.create_assignment(
            db.session, current_user,
            asset_id=form.asset_id.data,
            personnel_id=form.personnel_id.data,
            quantity=form.quantity.data or 1,
            assignment_date=form.assignment_date.data,
            expected_return_date=form.expected_return_date.data,
            notes=form.notes.data
        )

    return jsonify({'success': True, 'message': 'Asset assigned', 'data': assignment.to_dict()}), 201


@bp.route('/<int:id>/return', methods=['PUT'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander', 'logistics_officer')
def api_return(id):
    """Full return by default, partial when return_quantity is given"""
    form = validate_json(AssignmentReturnForm)

    with unit_of_work(db.session):
        assignment = assignment_service.return_assignment(
            db.session, current_user, id,
            return_quantity=form.return_quantity.data,
            return_date=form.return_date.data,
            notes=form.notes.data
        )

    return jsonify({'success': True, 'message': 'Asset returned', 'data': assignment.to_dict()})


@bp.route('/<int:id>/write-off', methods=['PUT'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander')
def api_write_off(id):
    form = validate_json(AssignmentWriteOffForm)

    with unit_of_work(db.session):
        assignment = assignment_service.write_off_assignment(
            db.session, current_user, id,
            status=form.status.data,
            notes=form.notes.data
        )

    return jsonify({'success': True, 'message': f'Assignment marked {assignment.status}', 'data': assignment.to_dict()})


@bp.route('/<int:id>', methods=['PUT'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander', 'logistics_officer')
def api_update(id):
    form = validate_json(AssignmentUpdateForm)

    with unit_of_work(db.session):
        assignment = assignment_service.update_assignment(db.session, current_user, id, provided_data(form))

    return jsonify({'success': True, 'message': 'Assignment updated', 'data': assignment.to_dict()})


@bp.route('/<int:id>', methods=['DELETE'])
@api_write_limit
@login_required
@role_required('admin', 'base_commander')
def api_delete(id):
    with unit_of_work(db.session):
        assignment_service.delete_assignment(db.session, current_user, id)

    return jsonify({'success': True, 'message': 'Assignment deleted'})
