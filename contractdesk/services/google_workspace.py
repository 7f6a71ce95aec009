"""Google Drive / Docs / Sheets REST client used by the sync pipeline.

Each method is one remote call (or a lookup-then-create pair) and raises
:class:`UpstreamError` with a stage name when the call fails: a transport
error, a non-2xx response or a body that cannot be read. Nothing is retried
here; the pipeline is safe to re-run from the start instead.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from contractdesk.core.config import Settings
from contractdesk.core.exceptions import UpstreamError
from contractdesk.services.google_auth import GoogleCredentialProvider

logger = logging.getLogger(__name__)

DRIVE_BASE = "https://www.googleapis.com/drive/v3"
DRIVE_UPLOAD_BASE = "https://www.googleapis.com/upload/drive/v3"
DOCS_BASE = "https://docs.googleapis.com/v1"
SHEETS_BASE = "https://sheets.googleapis.com/v4"

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
PDF_MIME_TYPE = "application/pdf"


@dataclass(frozen=True)
class DriveFile:
    id: str
    name: str | None = None
    web_view_link: str | None = None

    @property
    def link(self) -> str:
        return self.web_view_link or f"https://drive.google.com/file/d/{self.id}/view"


def _drive_literal(value: str) -> str:
    """Quote *value* for a Drive search query."""
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def _json(stage: str, res: httpx.Response) -> dict[str, Any]:
    try:
        data = res.json()
    except ValueError as exc:
        raise UpstreamError(stage, f"unreadable response: {res.text[:200]}") from exc
    if not isinstance(data, dict):
        raise UpstreamError(stage, f"unexpected response: {res.text[:200]}")
    return data


def _drive_file(stage: str, data: dict[str, Any]) -> DriveFile:
    if not data.get("id"):
        raise UpstreamError(stage, "response has no file id")
    return DriveFile(id=data["id"], name=data.get("name"), web_view_link=data.get("webViewLink"))


def build_multipart_related(metadata: dict[str, Any], content: bytes, content_type: str) -> tuple[bytes, str]:
    """Return ``(body, boundary)`` for a Drive ``uploadType=multipart`` request."""
    boundary = f"boundary_{uuid.uuid4().hex}"
    head = (
        f"--{boundary}\r\n"
        "Content-Type: application/json; charset=UTF-8\r\n\r\n"
        f"{json.dumps(metadata, ensure_ascii=False)}\r\n"
        f"--{boundary}\r\n"
        f"Content-Type: {content_type}\r\n\r\n"
    ).encode("utf-8")
    tail = f"\r\n--{boundary}--".encode("utf-8")
    return head + content + tail, boundary


class GoogleWorkspace:
    """Authorized session against Drive, Docs and Sheets for one request."""

    def __init__(self, settings: Settings, http: httpx.AsyncClient):
        self._settings = settings
        self._http = http
        self._credentials = GoogleCredentialProvider(settings, http)
        self._token: str | None = None

    async def authorize(self) -> None:
        self._token = await self._credentials.get_access_token()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _headers(self, **extra: str) -> dict[str, str]:
        if not self._token:
            raise RuntimeError("GoogleWorkspace.authorize() must be awaited first")
        return {"Authorization": f"Bearer {self._token}", **extra}

    async def _request(self, stage: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = self._headers(**kwargs.pop("headers", {}))
        try:
            res = await self._http.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise UpstreamError(stage, repr(exc)) from exc
        if res.status_code >= 400:
            raise UpstreamError(stage, f"status={res.status_code} {res.text}")
        return res

    # ------------------------------------------------------------------
    # Sheets
    # ------------------------------------------------------------------

    async def append_sheet_row(self, row: list[str]) -> str | None:
        """Append *row* to the configured tab; return ``updates.updatedRange``."""
        s = self._settings
        a1 = f"{quote(s.google_sheet_tab_name, safe='')}!A1"
        res = await self._request(
            "sheet_append",
            "POST",
            f"{SHEETS_BASE}/spreadsheets/{s.google_sheet_id}/values/{a1}:append",
            params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
            json={"values": [row]},
        )
        return (_json("sheet_append", res).get("updates") or {}).get("updatedRange")

    # ------------------------------------------------------------------
    # Drive
    # ------------------------------------------------------------------

    async def search_files(self, query: str, *, stage: str, page_size: int | None = None) -> list[DriveFile]:
        params: dict[str, Any] = {
            "q": query,
            "fields": "files(id,name,webViewLink)",
            "supportsAllDrives": "true",
            "includeItemsFromAllDrives": "true",
        }
        if page_size:
            params["pageSize"] = page_size
        res = await self._request(stage, "GET", f"{DRIVE_BASE}/files", params=params)
        return [_drive_file(stage, f) for f in _json(stage, res).get("files") or []]

    async def find_or_create_folder(self, parent_id: str, name: str) -> DriveFile:
        """Return the folder *name* under *parent_id*, creating it if absent.

        Best effort: two concurrent callers can both miss the lookup and
        create same-named folders. No locking is attempted.
        """
        query = " and ".join([
            f"{_drive_literal(parent_id)} in parents",
            f"name = {_drive_literal(name)}",
            f"mimeType = '{FOLDER_MIME_TYPE}'",
            "trashed = false",
        ])
        existing = await self.search_files(query, stage="folder_lookup", page_size=1)
        if existing:
            return existing[0]

        res = await self._request(
            "folder_create",
            "POST",
            f"{DRIVE_BASE}/files",
            params={"fields": "id,name,webViewLink", "supportsAllDrives": "true"},
            json={"name": name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent_id]},
        )
        folder = _drive_file("folder_create", _json("folder_create", res))
        logger.info("Created Drive folder %r (%s)", folder.name, folder.id)
        return folder

    async def find_files_by_name(self, folder_id: str, name: str) -> list[DriveFile]:
        query = f"{_drive_literal(folder_id)} in parents and name = {_drive_literal(name)} and trashed = false"
        return await self.search_files(query, stage="duplicate_lookup")

    async def copy_file(self, file_id: str, title: str, folder_id: str | None = None) -> DriveFile:
        body: dict[str, Any] = {"name": title}
        if folder_id:
            body["parents"] = [folder_id]
        try:
            res = await self._http.post(
                f"{DRIVE_BASE}/files/{file_id}/copy",
                params={"fields": "id,name", "supportsAllDrives": "true"},
                headers=self._headers(),
                json=body,
            )
        except httpx.HTTPError as exc:
            raise UpstreamError("template_copy", repr(exc)) from exc
        if res.status_code >= 400:
            detail = res.text
            if res.status_code == 404:
                detail = f"template not found or not shared with this account (404). {detail}"
            elif res.status_code == 403 and "storageQuotaExceeded" in detail:
                detail = f"Drive storage quota exceeded for this account (403). {detail}"
            raise UpstreamError("template_copy", detail)
        return _drive_file("template_copy", _json("template_copy", res))

    async def delete_file(self, file_id: str, *, stage: str) -> None:
        await self._request(
            stage, "DELETE", f"{DRIVE_BASE}/files/{file_id}", params={"supportsAllDrives": "true"},
        )

    async def export_pdf(self, file_id: str) -> bytes:
        res = await self._request(
            "pdf_export", "GET", f"{DRIVE_BASE}/files/{file_id}/export",
            params={"mimeType": PDF_MIME_TYPE},
        )
        return res.content

    async def upload_pdf(self, folder_id: str, filename: str, content: bytes) -> DriveFile:
        metadata = {"name": filename, "parents": [folder_id], "mimeType": PDF_MIME_TYPE}
        body, boundary = build_multipart_related(metadata, content, PDF_MIME_TYPE)
        res = await self._request(
            "pdf_upload",
            "POST",
            f"{DRIVE_UPLOAD_BASE}/files",
            params={
                "uploadType": "multipart",
                "fields": "id,name,webViewLink",
                "supportsAllDrives": "true",
            },
            headers={"Content-Type": f"multipart/related; boundary={boundary}"},
            content=body,
        )
        return _drive_file("pdf_upload", _json("pdf_upload", res))

    async def download_file(self, file_id: str) -> bytes:
        res = await self._request(
            "pdf_download", "GET", f"{DRIVE_BASE}/files/{file_id}",
            params={"alt": "media", "supportsAllDrives": "true"},
        )
        return res.content

    # ------------------------------------------------------------------
    # Docs
    # ------------------------------------------------------------------

    async def replace_placeholders(self, document_id: str, mapping: dict[str, str]) -> None:
        """Replace every literal ``{{key}}`` with its value in one batchUpdate."""
        requests = [
            {
                "replaceAllText": {
                    "containsText": {"text": f"{{{{{key}}}}}", "matchCase": True},
                    "replaceText": value,
                }
            }
            for key, value in mapping.items()
        ]
        await self._request(
            "placeholder_replace",
            "POST",
            f"{DOCS_BASE}/documents/{document_id}:batchUpdate",
            json={"requests": requests},
        )

    async def get_document(self, document_id: str) -> dict[str, Any]:
        res = await self._request("document_read", "GET", f"{DOCS_BASE}/documents/{document_id}")
        return _json("document_read", res)

    async def insert_text(self, document_id: str, index: int, text: str) -> None:
        await self._request(
            "document_append",
            "POST",
            f"{DOCS_BASE}/documents/{document_id}:batchUpdate",
            json={"requests": [{"insertText": {"location": {"index": index}, "text": text}}]},
        )
