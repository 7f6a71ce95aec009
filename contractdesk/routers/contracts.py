"""Contract record endpoints: CRUD under owner/admin rules, plus the synced PDF download."""

from typing import Annotated, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Response, status

from contractdesk.core.config import Settings
from contractdesk.core.deps import CurrentEmployee, DbSession, get_settings, get_workspace
from contractdesk.core.pagination import PaginationParams
from contractdesk.core.response import ListResponse, paginated
from contractdesk.schemas.contract import ContractCreate, ContractOut, ContractUpdate
from contractdesk.services.contracts import ContractService
from contractdesk.services.document_sync import DocumentSyncService
from contractdesk.services.google_workspace import GoogleWorkspace

router = APIRouter(prefix="/contracts", tags=["Contracts"])


@router.get("", response_model=ListResponse[ContractOut])
async def list_contracts(
    caller: CurrentEmployee,
    session: DbSession,
    pagination: PaginationParams = Depends(),
    created_by: Optional[str] = Query(default=None, description="Admins only: filter by owner"),
):
    """Staff get their own contracts; admins get everyone's."""
    items, total = await ContractService(session).list_contracts(caller, pagination, created_by)
    return paginated([ContractOut.model_validate(c) for c in items], total, pagination)


@router.post("", response_model=ContractOut, status_code=status.HTTP_201_CREATED)
async def create_contract(body: ContractCreate, caller: CurrentEmployee, session: DbSession):
    contract = await ContractService(session).create_contract(caller, body)
    return ContractOut.model_validate(contract)


@router.get("/{contract_id}", response_model=ContractOut)
async def get_contract(contract_id: str, caller: CurrentEmployee, session: DbSession):
    contract = await ContractService(session).get_contract(contract_id, caller)
    return ContractOut.model_validate(contract)


@router.patch("/{contract_id}", response_model=ContractOut)
async def update_contract(
    contract_id: str, body: ContractUpdate, caller: CurrentEmployee, session: DbSession,
):
    contract = await ContractService(session).update_contract(contract_id, caller, body)
    return ContractOut.model_validate(contract)


@router.delete("/{contract_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contract(contract_id: str, caller: CurrentEmployee, session: DbSession):
    await ContractService(session).delete_contract(contract_id, caller)


@router.get(
    "/{contract_id}/pdf",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def download_contract_pdf(
    contract_id: str,
    caller: CurrentEmployee,
    session: DbSession,
    app_settings: Annotated[Settings, Depends(get_settings)],
    workspace: Annotated[GoogleWorkspace, Depends(get_workspace)],
):
    """Stream the last synced PDF for the contract."""
    content, filename = await DocumentSyncService(session, app_settings, workspace).download_pdf(
        caller, contract_id,
    )
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )
