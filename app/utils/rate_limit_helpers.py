"""
Request rate limits for the API.

Limit strings come from the app config (``RATELIMIT_WRITE`` and
``RATELIMIT_AUTH``) so deployments can tune them without code changes.
Write limits are counted per signed-in user, login attempts per client
address.
"""

from flask import current_app, jsonify, request
from flask_login import current_user
from flask_limiter.errors import RateLimitExceeded
from flask_limiter.util import get_remote_address
from app import limiter


def user_or_address():
    """Limiter key: the user id once signed in, otherwise the client address"""
    if current_user.is_authenticated:
        return f'user:{current_user.id}'
    return get_remote_address()


def _write_limit():
    return current_app.config['RATELIMIT_WRITE']


def _auth_limit():
    return current_app.config['RATELIMIT_AUTH']


def api_write_limit(f):
    """Limit for POST, PUT and DELETE endpoints"""
    return limiter.limit(_write_limit, key_func=user_or_address)(f)


def api_auth_limit(f):
    """Limit for login, keyed by address to slow down password guessing"""
    return limiter.limit(_auth_limit, key_func=get_remote_address)(f)


def register_rate_limit_error_handler(app):
    @app.errorhandler(RateLimitExceeded)
    def handle_rate_limit_exceeded(e):
        app.logger.warning(f'RATE_LIMITED path={request.path} key={user_or_address()} limit={e.description}')
        return jsonify({
            'success': False,
            'error': f'Too many requests ({e.description}), please try again later.',
            'code': 'rate_limit_exceeded'
        }), 429
