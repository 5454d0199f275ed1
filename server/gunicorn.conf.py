"""Gunicorn configuration for production deployment.

Reads settings from environment variables (same as config.py).

Usage:
    gunicorn 'main:create_app()' -c gunicorn.conf.py
"""
import os

host = os.getenv("HOST", "0.0.0.0")
port = os.getenv("PORT", "3010")
log_level = os.getenv("LOG_LEVEL", "INFO").lower()
debug = os.getenv("DEBUG", "false").lower() == "true"

bind = f"{host}:{port}"

# Cache, accounts and sessions are per process: one worker only
workers = 1
worker_class = "uvicorn.workers.UvicornWorker"

timeout = int(os.getenv("GUNICORN_TIMEOUT", "120"))
graceful_timeout = int(os.getenv("GUNICORN_GRACEFUL_TIMEOUT", "30"))
keepalive = int(os.getenv("GUNICORN_KEEPALIVE", "5"))

accesslog = "-" if not debug else None
errorlog = "-"
loglevel = log_level

proc_name = "gameshelf-backend"
