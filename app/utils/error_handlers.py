"""
JSON error handlers so every failure uses the same response envelope.
"""

from flask import jsonify
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError
from werkzeug.exceptions import HTTPException
from app import db
from app.services.exceptions import AssetManagementError, ConcurrencyConflict


def register_error_handlers(app):
    """Register domain, HTTP and fallback error handlers on the app"""

    @app.errorhandler(AssetManagementError)
    def handle_domain_error(e):
        db.session.rollback()
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(StaleDataError)
    def handle_stale_data(e):
        db.session.rollback()
        app.logger.warning(f'Concurrent modification detected: {e}')
        error = ConcurrencyConflict('Record was modified by another request, please retry')
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(e):
        db.session.rollback()
        app.logger.warning(f'Integrity error: {e.orig}')
        return jsonify({
            'success': False,
            'error': 'Request conflicts with existing data',
            'code': 'conflict'
        }), 409

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({
            'success': False,
            'error': e.description or e.name,
            'code': e.name.lower().replace(' ', '_')
        }), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        db.session.rollback()
        app.logger.exception(f'Unhandled error: {e}')
        return jsonify({'success': False, 'error': 'Server error'}), 500
