"""
Core utilities shared across the REST API.

This package hosts configuration helpers (env vars) and logging setup.
Routers and services depend on these primitives instead of reading
os.environ directly.
"""
