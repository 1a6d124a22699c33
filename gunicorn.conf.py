"""
Gunicorn configuration for the Behavior Insights API.

Env vars that override defaults:
  PORT     — TCP port to bind
  WORKERS  — number of worker processes (default: 2)
  TIMEOUT  — seconds before an unresponsive worker is killed (default: 60)
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# Insight requests are CPU-bound over one snapshot; scale with processes.
workers = int(os.environ.get("WORKERS", "2"))

worker_class = "uvicorn.workers.UvicornWorker"

keepalive = 5

# A snapshot at the record cap finishes well inside this.
timeout = int(os.environ.get("TIMEOUT", "60"))

# stdout only; app logs go through the same stream (app/core/logging.py).
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

graceful_timeout = 30
