import logging
from datetime import datetime
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from config.config import config

# Initialize extensions
db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
cors = CORS()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["10000 per day", "1000 per hour"],
)


def create_app(config_name='default'):
    """Application factory pattern"""
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    config[config_name].init_app(app)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Initialize extensions with app
    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    cors.init_app(
        app,
        origins=app.config['CORS_ORIGIN'],
        supports_credentials=True,
        methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
        allow_headers=['Content-Type', 'Authorization']
    )
    limiter.init_app(app)

    # Register rate limit error handler
    from app.utils.rate_limit_helpers import register_rate_limit_error_handler
    register_rate_limit_error_handler(app)

    # JSON error envelopes
    from app.utils.error_handlers import register_error_handlers
    register_error_handlers(app)

    @login_manager.user_loader
    def load_user(user_id):
        from app.models import User
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'success': False, 'error': 'Authentication required'}), 401

    @app.route('/health')
    def health():
        return jsonify({
            'status': 'OK',
            'timestamp': datetime.utcnow().isoformat(),
            'environment': config_name
        })

    # Register API blueprints
    from app.views import (api_auth, api_bases, api_asset_types, api_personnel, api_assets,
                           api_transfers, api_purchases, api_expenditures, api_assignments, api_users)

    app.register_blueprint(api_auth.bp, url_prefix='/api/auth')
    app.register_blueprint(api_bases.bp, url_prefix='/api/bases')
    app.register_blueprint(api_asset_types.bp, url_prefix='/api/asset-types')
    app.register_blueprint(api_personnel.bp, url_prefix='/api/personnel')
    app.register_blueprint(api_assets.bp, url_prefix='/api/assets')
    app.register_blueprint(api_transfers.bp, url_prefix='/api/transfers')
    app.register_blueprint(api_purchases.bp, url_prefix='/api/purchases')
    app.register_blueprint(api_expenditures.bp, url_prefix='/api/expenditures')
    app.register_blueprint(api_assignments.bp, url_prefix='/api/assignments')
    app.register_blueprint(api_users.bp, url_prefix='/api/users')

    return app
