"""
Typed errors raised by the inventory ledger and the workflow services.

Each error carries a machine-readable ``code`` and the HTTP status the API
layer renders it with, so views never have to inspect message text.
"""


class AssetManagementError(Exception):
    """Base class for all domain errors"""
    code = 'error'
    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {
            'success': False,
            'error': self.message,
            'code': self.code
        }


class ValidationError(AssetManagementError):
    """Missing or malformed input"""
    code = 'validation_error'
    status_code = 400

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self):
        result = super().to_dict()
        if self.errors:
            result['errors'] = self.errors
        return result


class NotFound(AssetManagementError):
    code = 'not_found'
    status_code = 404


class Forbidden(AssetManagementError):
    """Role or base scope does not permit the action"""
    code = 'forbidden'
    status_code = 403


class InsufficientQuantity(AssetManagementError):
    """Available stock is below the requested amount"""
    code = 'insufficient_quantity'
    status_code = 400

    def __init__(self, available, requested, message=None):
        self.available = available
        self.requested = requested
        super().__init__(
            message or f'Insufficient available quantity. Available: {available}, Requested: {requested}'
        )


class InvariantViolation(AssetManagementError):
    """A ledger row would break available + assigned <= quantity"""
    code = 'invariant_violation'
    status_code = 400


class InvalidStateTransition(AssetManagementError):
    code = 'invalid_state_transition'
    status_code = 400

    def __init__(self, entity, current_status, action):
        self.entity = entity
        self.current_status = current_status
        self.action = action
        super().__init__(f'Cannot {action} {entity} in {current_status} status')


class ConcurrencyConflict(AssetManagementError):
    """The row changed underneath this request"""
    code = 'concurrency_conflict'
    status_code = 409
