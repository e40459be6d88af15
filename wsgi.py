"""
Production WSGI entry point for Gunicorn.

Gunicorn will import this file and look for a top-level variable named `app`.
Run a single worker: the plant store lives in process memory and is written
to one JSON file.

Usage:
    gunicorn -w 1 -k gthread --threads 4 -b 0.0.0.0:$PORT wsgi:app
"""

from plantpal import create_app

# Gunicorn looks for a top-level 'app' variable here.
app = create_app()
