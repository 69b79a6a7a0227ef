# gunicorn.conf.py
# Gunicorn configuration for the BandScrape collector

import os

wsgi_app = 'app:create_app()'
bind = f"{os.getenv('BANDSCRAPE_HOST', '0.0.0.0')}:{os.getenv('BANDSCRAPE_PORT', '8585')}"

# Logging
accesslog = '-'  # Log to stdout
errorlog = '-'   # Log to stderr
loglevel = 'info'

# Worker configuration: threads give one handler per in-flight request
workers = int(os.getenv('GUNICORN_WORKERS', '2'))
worker_class = 'gthread'
threads = int(os.getenv('GUNICORN_THREADS', '8'))
# Hard kill for a stuck worker; the per-request deadline fires well before this
timeout = 30

# Drain in-flight requests for up to this long on shutdown
graceful_timeout = 10

# Server mechanics
daemon = False
pidfile = None
umask = 0
user = None
group = None
tmp_upload_dir = None
