"""
Test environment: in-memory SQLite and a fixed signing key, set before any
application module reads its settings.
"""
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["CRM_AUTO_SYNC"] = "false"
os.environ.setdefault("LOG_LEVEL", "WARNING")
