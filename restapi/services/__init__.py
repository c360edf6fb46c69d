"""
High-level use cases for the REST API.

Each service module orchestrates repositories to implement the business rules
(validate a new account, apply a partial update, etc.).

Routers (FastAPI endpoints) call these services instead of touching the
MongoDB collection directly.
"""
