"""Shared fixtures for the test modules."""
import unittest
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import models  # noqa: F401  (registers tables)
from database import Base


def valid_application(**overrides):
    data = {
        "loan_type": "refinance",
        "amount_requested": 50_000,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "phone": "(555) 123-4567",
        "business_name": "Analytical Engines LLC",
        "business_address": "12 Babbage Row",
        "business_city": "Austin",
        "business_state": "TX",
        "business_zip": "73301",
        "years_in_business": 6,
        "loan_details": {"property_value": 900_000},
    }
    data.update(overrides)
    return data


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


FIXED_NOW = datetime(2026, 2, 1, 0, 1, 5, tzinfo=timezone.utc)


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    """Fresh in-memory database and session per test."""

    async def asyncSetUp(self):
        self.engine = create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )
        self.session = self.session_factory()

    async def asyncTearDown(self):
        await self.session.close()
        await self.engine.dispose()
