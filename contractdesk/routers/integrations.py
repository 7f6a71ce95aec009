"""Google Drive / Sheets synchronization endpoint."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends

from contractdesk.core.config import Settings
from contractdesk.core.deps import CurrentEmployee, DbSession, get_settings, get_workspace
from contractdesk.schemas.sync import SyncRequest, SyncResponse
from contractdesk.services.document_sync import DocumentSyncService
from contractdesk.services.google_workspace import GoogleWorkspace

router = APIRouter(prefix="/integrations", tags=["Integrations"])


@router.post("/google/sync", response_model=SyncResponse)
async def sync_contract(
    caller: CurrentEmployee,
    session: DbSession,
    app_settings: Annotated[Settings, Depends(get_settings)],
    workspace: Annotated[GoogleWorkspace, Depends(get_workspace)],
    body: Annotated[SyncRequest | None, Body()] = None,
):
    """Render the contract to PDF on Drive, log it to the sheet, and store the file id."""
    contract_id = body.contract_id if body else None
    result = await DocumentSyncService(session, app_settings, workspace).sync(caller, contract_id)
    return result.as_response()
