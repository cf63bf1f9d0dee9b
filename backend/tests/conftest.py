"""Root conftest — shared test configuration."""

import os

# Never touch a real database or reuse a production secret
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-0123456789abcdef-0123")
os.environ.setdefault("SEED_ON_STARTUP", "false")
os.environ.setdefault("LOG_FORMAT", "text")
