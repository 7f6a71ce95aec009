"""Google sync request/response schemas (snake_case on the wire)."""

from pydantic import BaseModel


class SyncRequest(BaseModel):
    contract_id: str | None = None


class GeneratedFile(BaseModel):
    kind: str
    id: str
    link: str


class SyncResponse(BaseModel):
    ok: bool = True
    drive_file_id: str
    drive_link: str
    generated_files: list[GeneratedFile]
    employee_folder_id: str
    employee_folder_name: str | None = None
    sheet_row: str | None = None
    updated_range: str | None = None
