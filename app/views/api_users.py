from flask import Blueprint, jsonify, request
from flask_login import login_required
from app.models import User
from app.utils.decorators import admin_required
from app.utils.pagination_helpers import paginated_response

bp = Blueprint('api_users', __name__)


@bp.route('/')
@login_required
@admin_required
def api_list():
    """User listing, optionally filtered by role or base"""
    query = User.query

    role = request.args.get('role')
    if role:
        query = query.filter(User.role == role)
    base_id = request.args.get('base_id', type=int)
    if base_id:
        query = query.filter(User.base_id == base_id)

    return jsonify(paginated_response(query.order_by(User.username)))
