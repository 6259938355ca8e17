"""Gunicorn configuration for production deployment."""

# Server socket
bind = '0.0.0.0:8080'

# Worker processes: 2 workers with 4 threads each
# SQLite serializes writers; bookings take the write lock with BEGIN IMMEDIATE.
workers = 2
threads = 4
worker_class = 'gthread'

# Requests are short; database waits are capped by DATABASE_TIMEOUT
timeout = 30
graceful_timeout = 30
keepalive = 5

# Logging
accesslog = '/app/logs/gunicorn-access.log'
errorlog = '/app/logs/gunicorn-error.log'
loglevel = 'info'
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process naming
proc_name = 'bookings'

# Preload app for faster worker startups (the mail thread starts on first send)
preload_app = True

# Worker recycling
max_requests = 1000
max_requests_jitter = 50

# Security
limit_request_line = 8190
limit_request_fields = 100
limit_request_field_size = 8190
