"""
Gunicorn entry point: ``gunicorn -c gunicorn.conf.py wsgi:app``

FLASK_ENV picks the config class and defaults to production.
"""

import os
from app import create_app

config_name = os.getenv('FLASK_ENV', 'production')
app = create_app(config_name)
app.logger.info(f'WSGI_READY config={config_name} version={app.config["APP_VERSION"]}')
