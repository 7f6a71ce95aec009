"""Employee directory for the admin dashboard."""

from fastapi import APIRouter

from contractdesk.core.deps import AdminEmployee, DbSession
from contractdesk.repositories.employee import EmployeeRepository
from contractdesk.schemas.employee import EmployeeOut

router = APIRouter(prefix="/employees", tags=["Employees"])


@router.get("", response_model=list[EmployeeOut])
async def list_employees(_admin: AdminEmployee, session: DbSession):
    """All employees ordered by name, active or not. Admins only."""
    employees = await EmployeeRepository(session).list_by_name()
    return [
        EmployeeOut(
            employee_id=e.auth_user_id,
            name=e.name,
            role=e.role,
            dob=e.dob,
            is_active=e.is_active,
        )
        for e in employees
    ]
