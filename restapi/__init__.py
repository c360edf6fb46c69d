"""Entry points for the REST API application."""
from restapi.app import app as asgi_app, create_app

__all__ = ["asgi_app", "create_app"]
