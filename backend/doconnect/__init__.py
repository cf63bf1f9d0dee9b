"""DoConnect Application Package — Q&A community API.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
