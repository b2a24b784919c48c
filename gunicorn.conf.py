"""
Gunicorn configuration file for the Military Asset Management API
"""

import os

# Server socket
bind = f"0.0.0.0:{os.getenv('PORT', '5000')}"
backlog = 2048

# Worker processes
# Each worker holds its own SQLAlchemy pool (pool_size + max_overflow connections),
# keep workers * 15 below the database connection limit
workers = int(os.getenv('GUNICORN_WORKERS', '2'))
worker_class = "sync"
max_requests = 1000
max_requests_jitter = 50
timeout = 30
keepalive = 2

# Process naming
proc_name = "military_asset_management"

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.getenv('LOG_LEVEL', 'info').lower()
access_log_format = '%(h)s %(u)s %(t)s "%(r)s" %(s)s %(b)s %(D)s'

daemon = False


def when_ready(server):
    """Called just after the server is started."""
    server.log.info(f"Asset management API ready. Listening on {bind} with {workers} workers")


def post_fork(server, worker):
    """Called just after a worker has been forked."""
    server.log.info(f"Worker spawned (pid: {worker.pid})")


def worker_abort(worker):
    """Called when a worker received the SIGABRT signal."""
    worker.log.warning(f"Worker timed out and was aborted (pid: {worker.pid})")
