"""
Gunicorn configuration for the Sound Empire API.

The career is one JSON document per save slot, written on every action, so
the app runs a single worker: one writer, no lost updates.
Env vars that override defaults:
  PORT: TCP port to bind
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# Single writer per save slot.
workers = 1

# Uvicorn's ASGI event loop inside Gunicorn's process manager.
worker_class = "uvicorn.workers.UvicornWorker"

keepalive = 5

# Kill a worker that hasn't responded in 120 s.
timeout = 120

# stdout only.
loglevel = "info"
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

graceful_timeout = 30
