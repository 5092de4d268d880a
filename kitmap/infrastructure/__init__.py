"""Infrastructure Layer: database sessions, SQL repository, structured logging.

Invariants:
    - Only this layer and services/ talk to SQLAlchemy sessions
"""
