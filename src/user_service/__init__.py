"""User management HTTP service.

CRUD endpoints for user records backed by a relational store, with password
hashing and field validation.
"""

__version__ = "0.1.0"
