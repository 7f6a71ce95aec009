"""SQLAlchemy ORM model for Employees.

Employees are provisioned out of band by an administrator and are read-only
to the API. ``auth_user_id`` is the employee id used everywhere else: it is
the identity-provider user id of the shadow account and the ``created_by``
value on contracts.
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Boolean, Date, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from contractdesk.db.base import Base
from contractdesk.domain.mixins import CreatedAtMixin

ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"


class Employee(Base, CreatedAtMixin):
    __tablename__ = "employees"
    __table_args__ = (UniqueConstraint("name", "dob", name="employees_name_dob_unique"),)

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    auth_user_id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    dob: Mapped[date] = mapped_column(Date, nullable=False)
    pin_hash: Mapped[str] = mapped_column(String(100), nullable=False)
    # "admin" | "staff"
    role: Mapped[str] = mapped_column(String(20), default=ROLE_STAFF, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
