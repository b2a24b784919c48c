from flask import Blueprint, current_app, request, jsonify
from flask_login import login_required, login_user, logout_user, current_user
from sqlalchemy import or_
from app import db
from app.models import User, ActivityLog
from app.forms import LoginForm
from app.utils.form_helpers import validate_json
from app.utils.rate_limit_helpers import api_auth_limit

bp = Blueprint('api_auth', __name__)


@bp.route('/login', methods=['POST'])
@api_auth_limit  # Strict rate limiting for login (10 per minute)
def api_login():
    """API endpoint for login"""
    form = validate_json(LoginForm)
    identifier = form.identifier

    user = User.query.filter(or_(User.username == identifier, User.email == identifier)).first()
    if not user or not user.check_password(form.password.data):
        current_app.logger.warning(f'LOGIN_FAILED identifier={identifier} ip={request.remote_addr}')
        return jsonify({'success': False, 'error': 'Invalid credentials', 'code': 'invalid_credentials'}), 401
    if not user.is_active:
        return jsonify({'success': False, 'error': 'Account is disabled', 'code': 'account_disabled'}), 403

    login_user(user)
    ActivityLog.log_activity(db.session, user, 'LOGIN_API', 'users', user.id)
    db.session.commit()
    current_app.logger.info(f'LOGIN user_id={user.id} role={user.role}')

    return jsonify({
        'success': True,
        'message': 'Login successful',
        'data': user.to_dict()
    })


@bp.route('/logout', methods=['POST'])
def api_logout():
    """API endpoint for logout"""
    if current_user.is_authenticated:
        ActivityLog.log_activity(db.session, current_user, 'LOGOUT_API', 'users', current_user.id)
        db.session.commit()
        logout_user()

    return jsonify({'success': True, 'message': 'Logout successful'})


@bp.route('/me', methods=['GET'])
@login_required
def api_me():
    """Get current user information"""
    data = current_user.to_dict()
    data['base_name'] = current_user.base.name if current_user.base else None
    return jsonify({'success': True, 'data': data})
