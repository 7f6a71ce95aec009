"""Contract service: owner/admin visibility rules over the contracts table.

Staff see and change only the contracts they created; admins see all of
them. The sync pipeline reuses :meth:`ContractService.get_for_caller`, so
the same 404 / 403 rules apply everywhere a contract is loaded.

Rule: No FastAPI here. Raise AppException subclasses only.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from contractdesk.core.exceptions import AuthorizationError, NotFoundError
from contractdesk.core.pagination import PaginationParams
from contractdesk.domain.contract import DELEGATION_FIELDS, Contract
from contractdesk.domain.employee import Employee
from contractdesk.repositories.contract import ContractRepository
from contractdesk.schemas.contract import ContractCreate, ContractUpdate

logger = logging.getLogger(__name__)

# Set by the server only; never accepted from a request body.
_PROTECTED_FIELDS = {"id", "created_by", "drive_file_id", "sheet_row_id", "created_at", "updated_at"}
_NON_NULLABLE_FIELDS = {
    "customer_name",
    "employee_name",
    "consent_personal_info",
    "consent_required_terms",
    "confirmed",
    *DELEGATION_FIELDS,
}


def can_access(caller: Employee, contract: Contract) -> bool:
    return caller.is_admin or contract.created_by == caller.auth_user_id


class ContractService:
    def __init__(self, session: AsyncSession):
        self._repo = ContractRepository(session)

    async def get_for_caller(self, contract_id: str, caller: Employee) -> Contract:
        contract = await self._repo.get_by_id(contract_id)
        if contract is None:
            raise NotFoundError("Contract", contract_id)
        if not can_access(caller, contract):
            logger.info(
                "Employee %s denied access to contract %s", caller.auth_user_id, contract_id,
            )
            raise AuthorizationError("no permission for this contract.")
        return contract

    async def list_contracts(
        self, caller: Employee, pagination: PaginationParams, created_by: str | None = None,
    ):
        if caller.is_admin:
            filters = {"created_by": created_by} if created_by else None
        else:
            filters = {"created_by": caller.auth_user_id}
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters=filters,
        )

    async def get_contract(self, contract_id: str, caller: Employee) -> Contract:
        return await self.get_for_caller(contract_id, caller)

    async def create_contract(self, caller: Employee, data: ContractCreate) -> Contract:
        values = data.model_dump(exclude_none=True)
        values["employee_name"] = values.get("employee_name") or caller.name
        contract = await self._repo.create(created_by=caller.auth_user_id, **values)
        logger.info("Employee %s created contract %s", caller.auth_user_id, contract.id)
        return contract

    async def update_contract(self, contract_id: str, caller: Employee, data: ContractUpdate) -> Contract:
        await self.get_for_caller(contract_id, caller)
        values = {
            k: v for k, v in data.model_dump(exclude_unset=True).items()
            if k not in _PROTECTED_FIELDS
        }
        # NOT NULL columns keep their value when a request sends null
        for field in _NON_NULLABLE_FIELDS:
            if field in values and values[field] is None:
                values.pop(field)
        updated = await self._repo.update(contract_id, **values)
        return updated  # type: ignore[return-value]

    async def delete_contract(self, contract_id: str, caller: Employee) -> None:
        await self.get_for_caller(contract_id, caller)
        deleted = await self._repo.delete(contract_id)
        if not deleted:
            raise NotFoundError("Contract", contract_id)
        logger.info("Employee %s deleted contract %s", caller.auth_user_id, contract_id)
