from datetime import date

from contractdesk.schemas.common import CamelModel


class EmployeeOut(CamelModel):
    employee_id: str
    name: str
    role: str
    dob: date
    is_active: bool
