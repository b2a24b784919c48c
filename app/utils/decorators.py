from functools import wraps
from flask import current_app, request
from flask_login import current_user
from app.models.user import ROLES
from app.services.exceptions import Forbidden


def role_required(*roles):
    """
    Allow the view only for users holding one of ``roles``.

    Goes below ``login_required``, which answers anonymous requests first.
    """
    unknown = set(roles) - set(ROLES)
    if unknown:
        raise ValueError(f'Unknown roles: {", ".join(sorted(unknown))}')

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if current_user.role not in roles:
                current_app.logger.warning(
                    f'ACCESS_DENIED user_id={current_user.id} role={current_user.role} '
                    f'endpoint={request.endpoint}'
                )
                raise Forbidden('Insufficient permissions for this action')
            return f(*args, **kwargs)
        return decorated_function
    return decorator


admin_required = role_required('admin')


def require_base_access(user, base_id, message='You can only act on records of your own base'):
    """Raise Forbidden unless the user may act on the given base"""
    if not user.has_base_access(base_id):
        raise Forbidden(message)
