"""
Gunicorn Configuration

    gunicorn merchant_analytics.main:app -c gunicorn.conf.py
"""

import multiprocessing
import os

bind = os.getenv("BIND", "0.0.0.0:8000")
backlog = 2048

# The rate limiter is in-memory per worker; keep the count modest
workers = int(os.getenv("API_WORKERS", min(multiprocessing.cpu_count() * 2 + 1, 8)))
worker_class = "uvicorn.workers.UvicornWorker"
max_requests = 10000
max_requests_jitter = 1000
timeout = 60
keepalive = 5
graceful_timeout = 30

proc_name = "merchant-analytics-api"

errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
accesslog = None  # RequestLoggingMiddleware logs each request


def when_ready(server):
    server.log.info("Merchant Analytics API ready on %s", bind)


def worker_abort(worker):
    worker.log.warning("Worker %s aborted (timeout)", worker.pid)
