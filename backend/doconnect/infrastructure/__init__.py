"""Infrastructure Layer — database, security, storage, logging and push delivery.

Invariants:
    - Infrastructure never imports from services/ or api/
    - Library errors are mapped to core/errors.py types at this boundary
"""
