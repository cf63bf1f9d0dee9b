"""Services Layer — one service class per resource, validate-then-persist.

Invariants:
    - Services raise DoConnectError subclasses; they never build HTTP responses
    - Rules live in core/; services only load, call the rule, persist
    - A service commits its own unit of work, then delivers queued notifications
"""
