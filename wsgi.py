"""
WSGI / Flask-Migrate entry point.

Usage:
    flask --app wsgi db upgrade      # apply migrations
    flask --app wsgi tables init     # create dashboard tables
    gunicorn wsgi:app
"""

from dashboard import create_app

app = create_app()
