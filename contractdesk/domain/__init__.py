"""Domain package: all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  employee.py  staff identities (read-only to the API)
  contract.py  insurance-claim contract records
  mixins.py    Shared CreatedAtMixin, TimestampMixin
"""

from contractdesk.domain.contract import Contract
from contractdesk.domain.employee import Employee

__all__ = [
    "Contract",
    "Employee",
]
