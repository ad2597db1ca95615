"""Gunicorn configuration for the LibRoom API."""

import os

# Server socket
bind = os.environ.get('LIBROOM_BIND', '0.0.0.0:8000')

# Threaded workers; SQLite serializes writers on its write lock, so a
# small number of processes is enough.
workers = int(os.environ.get('LIBROOM_WORKERS', 2))
threads = int(os.environ.get('LIBROOM_THREADS', 4))
worker_class = 'gthread'

# Document uploads are capped at 5MB by MAX_CONTENT_LENGTH
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logging
log_dir = os.environ.get('LIBROOM_LOG_DIR', 'logs')
accesslog = os.path.join(log_dir, 'gunicorn-access.log')
errorlog = os.path.join(log_dir, 'gunicorn-error.log')
loglevel = os.environ.get('LIBROOM_LOG_LEVEL', 'info')
access_log_format = '%(h)s %(u)s %(t)s "%(r)s" %(s)s %(b)s %(D)s'

proc_name = 'libroom'

# The app factory runs once in the master
preload_app = True

# Recycle workers periodically
max_requests = 1000
max_requests_jitter = 50

# Request limits
limit_request_line = 8190
limit_request_fields = 100
limit_request_field_size = 8190
