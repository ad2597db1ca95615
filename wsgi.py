"""WSGI entry point for the LibRoom API.

Run with: gunicorn -c gunicorn.conf.py wsgi:application
Requires SECRET_KEY and DATABASE_PATH when FLASK_ENV=production (the default).
"""
import os

from app import create_app

application = create_app(os.environ.get('FLASK_ENV', 'production'))
