"""Employee repository: read-only lookups used by login and caller resolution."""

from datetime import date

from contractdesk.domain.employee import Employee
from contractdesk.repositories.base import BaseRepository


class EmployeeRepository(BaseRepository[Employee]):
    model = Employee

    async def find_active_by_name_and_dob(self, name: str, dob: date) -> Employee | None:
        return await self.find_one(name=name, dob=dob, is_active=True)

    async def get_by_auth_user_id(self, auth_user_id: str) -> Employee | None:
        return await self.find_one(auth_user_id=auth_user_id)

    async def list_by_name(self) -> list[Employee]:
        items, _ = await self.list(limit=1000, order_by="name", order="asc")
        return items
