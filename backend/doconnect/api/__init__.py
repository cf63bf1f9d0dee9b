"""API Layer — FastAPI routes, auth dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON responses (files excepted)

Design Decisions:
    - Thin routes delegate to services; services are built per request by
      the providers in dependencies.py
"""
