"""Pydantic Schemas: request/response validation for API endpoints and analytics payloads.

Invariants:
    - Schemas validate at the system boundary (user input, API responses, exports)
    - camelCase aliases on the wire, snake_case attributes in Python

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
