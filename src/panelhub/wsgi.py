# src/panelhub/wsgi.py - gunicorn entry point: gunicorn panelhub.wsgi:app
from .main import PanelApplication

application = PanelApplication()
app = application.create_api().app
