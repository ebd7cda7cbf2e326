"""
WSGI entrypoint. In production, point your server (gunicorn/uwsgi) here:

    gunicorn 'wsgi:app' --bind 127.0.0.1:5000 --workers 1

Use a single worker: each worker owns its own capture thread.
"""

from snifferapp import create_app

app = create_app()
