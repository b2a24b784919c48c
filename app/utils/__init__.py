from app.utils.decorators import role_required, admin_required, require_base_access

__all__ = [
    'role_required',
    'admin_required',
    'require_base_access'
]
