"""Document synchronization: contract row → Google Sheet row + rendered PDF on Drive.

Pipeline for one contract, strictly sequential:

  1. authorize against Google
  2. append a summary row to the tracking sheet (when configured)
  3. resolve the template plan
  4. find or create the employee folder
  5. per template: copy → replace placeholders → export PDF → delete copy
  6. merge the PDFs in plan order when there is more than one
  7. delete same-named PDFs in the folder, upload the new one
  8. write drive_file_id / sheet_row_id back onto the contract

Any failure aborts the run with an :class:`UpstreamError` naming the stage.
Nothing is retried; re-running replaces the previous PDF because of step 7.
The sheet row is not deduplicated, so every run appends one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from contractdesk.core.config import Settings
from contractdesk.core.exceptions import ConfigurationError, ValidationError
from contractdesk.core.normalize import (
    make_contract_pdf_filename,
    parse_sheet_row,
    sanitize_drive_name,
    utc_now,
    utc_today_iso,
)
from contractdesk.domain.contract import Contract
from contractdesk.domain.employee import Employee
from contractdesk.repositories.contract import ContractRepository
from contractdesk.services.contracts import ContractService
from contractdesk.services.google_workspace import DriveFile, GoogleWorkspace
from contractdesk.services.pdf import merge_pdfs
from contractdesk.services.placeholders import build_placeholder_map
from contractdesk.services.templates import TemplatePlanEntry, resolve_template_plan

logger = logging.getLogger(__name__)

KIND_MERGED = "combined_merged"


@dataclass
class SyncResult:
    drive_file: DriveFile
    kind: str
    folder: DriveFile
    sheet_row: str | None = None
    updated_range: str | None = None

    def as_response(self) -> dict:
        return {
            "ok": True,
            "drive_file_id": self.drive_file.id,
            "drive_link": self.drive_file.link,
            "generated_files": [
                {"kind": self.kind, "id": self.drive_file.id, "link": self.drive_file.link},
            ],
            "employee_folder_id": self.folder.id,
            "employee_folder_name": self.folder.name,
            "sheet_row": self.sheet_row,
            "updated_range": self.updated_range,
        }


def build_sheet_row(contract: Contract) -> list[str]:
    created_at = contract.created_at.isoformat() if contract.created_at else ""
    return [
        contract.id,
        contract.employee_name or "",
        contract.customer_name or "",
        contract.customer_phone or "",
        contract.contract_type or "",
        "true" if contract.confirmed else "false",
        created_at,
        utc_now().isoformat(),
    ]


def copy_title(kind: str, contract: Contract) -> str:
    return f"contract_{kind}_{contract.customer_name or contract.id}_{utc_today_iso()}"


class DocumentSyncService:
    def __init__(self, session: AsyncSession, settings: Settings, workspace: GoogleWorkspace):
        self._contracts = ContractService(session)
        self._repo = ContractRepository(session)
        self._settings = settings
        self._workspace = workspace

    async def sync(self, caller: Employee, contract_id: str | None) -> SyncResult:
        if not contract_id:
            raise ValidationError("contract_id is required.")
        root_folder_id = self._settings.google_drive_folder_id
        if not root_folder_id:
            raise ConfigurationError("GOOGLE_DRIVE_FOLDER_ID")

        contract = await self._contracts.get_for_caller(contract_id, caller)
        ws = self._workspace
        await ws.authorize()

        updated_range = None
        sheet_row = None
        if self._settings.google_sheet_id:
            updated_range = await ws.append_sheet_row(build_sheet_row(contract))
            sheet_row = parse_sheet_row(updated_range)

        plan = resolve_template_plan(contract.contract_type, self._settings.template_ids)
        if not plan:
            raise ConfigurationError(
                "GOOGLE_TEMPLATE_ADJUSTER_DOC_ID / GOOGLE_TEMPLATE_ADMIN_DOC_ID / "
                "GOOGLE_TEMPLATE_COMBINED_DOC_ID"
            )

        folder = await ws.find_or_create_folder(
            root_folder_id, sanitize_drive_name(contract.employee_name or caller.name),
        )

        mapping = build_placeholder_map(contract)
        parts = [await self._render(entry, contract, folder.id, mapping) for entry in plan]
        if len(parts) > 1:
            pdf_bytes = merge_pdfs(parts)
            kind = KIND_MERGED
        else:
            pdf_bytes = parts[0]
            kind = plan[0].kind

        filename = make_contract_pdf_filename(contract.customer_name, contract.created_at)
        for stale in await ws.find_files_by_name(folder.id, filename):
            await ws.delete_file(stale.id, stage="duplicate_delete")
            logger.info("Replaced previous PDF %s for contract %s", stale.id, contract.id)

        uploaded = await ws.upload_pdf(folder.id, filename, pdf_bytes)
        await self._repo.record_sync_result(
            contract.id, drive_file_id=uploaded.id, sheet_row_id=sheet_row,
        )
        logger.info(
            "Synced contract %s to %s (%s, %d template(s), sheet row %s)",
            contract.id, uploaded.id, kind, len(plan), sheet_row,
        )
        return SyncResult(
            drive_file=uploaded,
            kind=kind,
            folder=folder,
            sheet_row=sheet_row,
            updated_range=updated_range,
        )

    async def _render(
        self, entry: TemplatePlanEntry, contract: Contract, folder_id: str, mapping: dict[str, str],
    ) -> bytes:
        """Render one template to PDF through a temporary Docs copy."""
        ws = self._workspace
        copy = await ws.copy_file(entry.template_id, copy_title(entry.kind, contract), folder_id)
        failure: Exception | None = None
        try:
            await ws.replace_placeholders(copy.id, mapping)
            return await ws.export_pdf(copy.id)
        except Exception as exc:
            failure = exc
            raise
        finally:
            try:
                await ws.delete_file(copy.id, stage="temp_cleanup")
            except Exception:
                # the cleanup error replaces the rendering error for the caller
                if failure is not None:
                    logger.error(
                        "Rendering %s for contract %s failed at stage %s (%s); temp copy %s was not deleted",
                        entry.kind, contract.id, getattr(failure, "stage", None) or type(failure).__name__,
                        failure, copy.id,
                    )
                raise

    async def download_pdf(self, caller: Employee, contract_id: str) -> tuple[bytes, str]:
        """Return ``(pdf bytes, download filename)`` for the contract's last synced PDF."""
        contract = await self._contracts.get_for_caller(contract_id, caller)
        if not contract.drive_file_id:
            raise ValidationError("PDF not generated yet. Save contract first.")

        await self._workspace.authorize()
        content = await self._workspace.download_file(contract.drive_file_id)
        return content, make_contract_pdf_filename(contract.customer_name, contract.created_at)
