#!/usr/bin/env python3
"""
Seed Script for Employees

Creates the demo employees used in development (all with PIN 0000):
- 사장님 (admin)
- 김직원 (staff)
- 이직원 (staff)

Existing rows (matched by auth_user_id) are updated in place, so the script
can be re-run safely. Tables are created first when they do not exist.

Run with: python scripts/seed_employees.py
"""

import asyncio
import logging
import os
import sys
from datetime import date

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from contractdesk.core.config import settings
from contractdesk.db.base import Base, dispose_engines, get_engine, session_factory
from contractdesk.domain.employee import ROLE_ADMIN, ROLE_STAFF
from contractdesk.repositories.employee import EmployeeRepository
from contractdesk.services.auth import hash_pin

logger = logging.getLogger("seed_employees")

DEFAULT_PIN = "0000"

EMPLOYEES = [
    {
        "auth_user_id": "11111111-1111-1111-1111-111111111111",
        "name": "사장님",
        "dob": date(1980, 1, 1),
        "role": ROLE_ADMIN,
    },
    {
        "auth_user_id": "22222222-2222-2222-2222-222222222222",
        "name": "김직원",
        "dob": date(1995, 5, 10),
        "role": ROLE_STAFF,
    },
    {
        "auth_user_id": "33333333-3333-3333-3333-333333333333",
        "name": "이직원",
        "dob": date(1998, 9, 20),
        "role": ROLE_STAFF,
    },
]


async def seed() -> None:
    async with get_engine(settings).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with session_factory(settings)() as session:
        repo = EmployeeRepository(session)
        for employee in EMPLOYEES:
            values = {**employee, "pin_hash": hash_pin(DEFAULT_PIN), "is_active": True}
            existing = await repo.get_by_auth_user_id(employee["auth_user_id"])
            if existing:
                await repo.update(existing.id, **values)
                logger.info("Updated %s (%s)", employee["name"], employee["role"])
            else:
                await repo.create(**values)
                logger.info("Created %s (%s)", employee["name"], employee["role"])
        await session.commit()

    await dispose_engines()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
    asyncio.run(seed())
