"""
FastAPI routers grouped by resource (root, users).

Each file inside this package exposes an APIRouter that is included in the
application built by restapi.app.create_app.
"""
