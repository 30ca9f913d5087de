import os

bind = f"0.0.0.0:{os.getenv('PORT', 8000)}"
# Each worker owns its own connection pool (DB_POOL_SIZE + DB_MAX_OVERFLOW connections)
workers = int(os.getenv('WEB_CONCURRENCY', 2))
worker_class = "uvicorn.workers.UvicornWorker"
timeout = int(os.getenv('GUNICORN_TIMEOUT', 60))
max_requests = 1000
max_requests_jitter = 100
accesslog = "-"
loglevel = os.getenv('LOG_LEVEL', 'info').lower()
