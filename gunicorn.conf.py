"""
Production Server Configuration

Run the reporting API with Uvicorn workers under Gunicorn.
"""

import multiprocessing
import os

# Server socket
bind = os.getenv("BIND", "0.0.0.0:8000")
backlog = 2048

# Report requests hold whole collections in memory; keep the worker count modest
workers = int(os.getenv("WORKERS", min(multiprocessing.cpu_count() + 1, 8)))
worker_class = "uvicorn.workers.UvicornWorker"
max_requests = 5000
max_requests_jitter = 500
timeout = 120
keepalive = 5
graceful_timeout = 30

# Process naming
proc_name = "ecommerce-admin-reports"

# Logging (application logs are rendered by structlog)
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
accesslog = None
