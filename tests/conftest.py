import uuid
from datetime import date

import fitz
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from contractdesk.core.config import Settings
from contractdesk.core.deps import get_identity_provider, get_settings, get_workspace
from contractdesk.core.exceptions import UnauthorizedError, UpstreamError
from contractdesk.db.base import Base, get_db
from contractdesk.domain.employee import ROLE_ADMIN, ROLE_STAFF, Employee
from contractdesk.main import app
from contractdesk.services.auth import hash_pin
from contractdesk.services.google_workspace import DriveFile

ADMIN_ID = "11111111-1111-1111-1111-111111111111"
STAFF_ID = "22222222-2222-2222-2222-222222222222"
OTHER_STAFF_ID = "33333333-3333-3333-3333-333333333333"
INACTIVE_ID = "44444444-4444-4444-4444-444444444444"

TEMPLATE_ADJUSTER = "tpl-adjuster"
TEMPLATE_ADMIN = "tpl-admin"
ROOT_FOLDER = "root-folder"


def make_pdf(*lines: str) -> bytes:
    """One page per line, each page carrying its line as text."""
    doc = fitz.open()
    for line in lines:
        page = doc.new_page()
        page.insert_text((72, 72), line)
    data = doc.tobytes()
    doc.close()
    return data


def pdf_page_texts(data: bytes) -> list[str]:
    doc = fitz.open(stream=data, filetype="pdf")
    try:
        return [page.get_text().strip() for page in doc]
    finally:
        doc.close()


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite+aiosqlite:///:memory:",
        "supabase_url": "https://idp.test",
        "supabase_anon_key": "anon-key",
        "supabase_service_role_key": "service-key",
        "auth_password_pepper": "pepper",
        "google_oauth_access_token": "static-google-token",
        "google_drive_folder_id": ROOT_FOLDER,
        "google_sheet_id": "sheet-1",
        "google_template_adjuster_doc_id": TEMPLATE_ADJUSTER,
        "google_template_admin_doc_id": TEMPLATE_ADMIN,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------

class FakeIdentityProvider:
    """Issues ``token-<user id>`` access tokens and remembers every upsert."""

    def __init__(self):
        self.upserts: list[tuple[str, str, str]] = []
        self.grants: list[tuple[str, str]] = []

    async def get_user(self, access_token: str) -> dict:
        if not access_token.startswith("token-"):
            raise UnauthorizedError("Invalid access token.")
        return {"id": access_token.removeprefix("token-")}

    async def upsert_user(self, user_id: str, email: str, password: str) -> None:
        self.upserts.append((user_id, email, password))

    async def password_grant(self, email: str, password: str) -> dict:
        self.grants.append((email, password))
        user_id = email.split("@", 1)[0]
        return {
            "access_token": f"token-{user_id}",
            "refresh_token": f"refresh-{user_id}",
            "expires_at": 1_900_000_000,
        }

    async def refresh_grant(self, refresh_token: str) -> dict:
        if not refresh_token.startswith("refresh-"):
            raise UnauthorizedError("Refresh token rejected.")
        user_id = refresh_token.removeprefix("refresh-")
        return {
            "access_token": f"token-{user_id}",
            "refresh_token": f"refresh-{user_id}",
            "expires_at": 1_900_000_000,
        }


class FakeWorkspace:
    """Drive / Docs / Sheets held in dicts.

    ``files`` maps id → {"name", "parent", "content", "mime"}; a template
    export yields a one-page PDF whose text is the template id.
    Add a stage to ``fail_stages`` (or set ``fail_stage``) to make the call
    for that stage raise UpstreamError.
    """

    def __init__(self):
        self.authorized = False
        self.files: dict[str, dict] = {}
        self.sheet_rows: list[list[str]] = []
        self.replacements: dict[str, dict[str, str]] = {}
        self.fail_stage: str | None = None
        self.fail_stages: set[str] = set()
        self.calls: list[str] = []

    def _maybe_fail(self, stage: str) -> None:
        self.calls.append(stage)
        if stage == self.fail_stage or stage in self.fail_stages:
            raise UpstreamError(stage, "simulated failure")

    def _new_id(self) -> str:
        return f"file-{uuid.uuid4().hex[:8]}"

    def files_named(self, name: str, parent: str | None = None) -> list[str]:
        return [
            fid for fid, f in self.files.items()
            if f["name"] == name and (parent is None or f["parent"] == parent)
        ]

    async def authorize(self) -> None:
        self._maybe_fail("google_auth")
        self.authorized = True

    async def append_sheet_row(self, row: list[str]) -> str:
        self._maybe_fail("sheet_append")
        self.sheet_rows.append(row)
        n = len(self.sheet_rows) + 1  # header row
        return f"Sheet1!A{n}:H{n}"

    async def find_or_create_folder(self, parent_id: str, name: str) -> DriveFile:
        self._maybe_fail("folder_lookup")
        for fid, f in self.files.items():
            if f["parent"] == parent_id and f["name"] == name and f["mime"] == "folder":
                return DriveFile(id=fid, name=name)
        fid = self._new_id()
        self.files[fid] = {"name": name, "parent": parent_id, "content": b"", "mime": "folder"}
        return DriveFile(id=fid, name=name)

    async def copy_file(self, file_id: str, title: str, folder_id: str | None = None) -> DriveFile:
        self._maybe_fail("template_copy")
        fid = self._new_id()
        self.files[fid] = {
            "name": title, "parent": folder_id, "content": file_id.encode(), "mime": "doc",
        }
        return DriveFile(id=fid, name=title)

    async def replace_placeholders(self, document_id: str, mapping: dict[str, str]) -> None:
        self._maybe_fail("placeholder_replace")
        self.replacements[document_id] = dict(mapping)

    async def export_pdf(self, file_id: str) -> bytes:
        self._maybe_fail("pdf_export")
        return make_pdf(self.files[file_id]["content"].decode())

    async def delete_file(self, file_id: str, *, stage: str) -> None:
        self._maybe_fail(stage)
        self.files.pop(file_id, None)

    async def find_files_by_name(self, folder_id: str, name: str) -> list[DriveFile]:
        self._maybe_fail("duplicate_lookup")
        return [DriveFile(id=fid, name=name) for fid in self.files_named(name, folder_id)]

    async def upload_pdf(self, folder_id: str, filename: str, content: bytes) -> DriveFile:
        self._maybe_fail("pdf_upload")
        fid = self._new_id()
        self.files[fid] = {"name": filename, "parent": folder_id, "content": content, "mime": "pdf"}
        return DriveFile(id=fid, name=filename)

    async def download_file(self, file_id: str) -> bytes:
        self._maybe_fail("pdf_download")
        return self.files[file_id]["content"]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def workspace() -> FakeWorkspace:
    return FakeWorkspace()


@pytest_asyncio.fixture
async def test_db(tmp_path):
    """Fresh SQLite database per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def employees(test_db: AsyncSession) -> dict[str, Employee]:
    """사장님 (admin), 김직원 / 이직원 (staff) and a deactivated 퇴사자, all with PIN 0000."""
    pin_hash = hash_pin("0000")
    rows = {
        "admin": Employee(auth_user_id=ADMIN_ID, name="사장님", dob=date(1980, 1, 1), role=ROLE_ADMIN),
        "staff": Employee(auth_user_id=STAFF_ID, name="김직원", dob=date(1995, 5, 10), role=ROLE_STAFF),
        "other": Employee(auth_user_id=OTHER_STAFF_ID, name="이직원", dob=date(1998, 9, 20), role=ROLE_STAFF),
        "inactive": Employee(
            auth_user_id=INACTIVE_ID, name="퇴사자", dob=date(1990, 2, 2), role=ROLE_STAFF, is_active=False,
        ),
    }
    for employee in rows.values():
        employee.pin_hash = pin_hash
        test_db.add(employee)
    await test_db.commit()
    for employee in rows.values():
        await test_db.refresh(employee)
    return rows


@pytest_asyncio.fixture
async def client(test_db, settings, identity, workspace, employees):
    """API client wired to the test database and the in-memory collaborators."""

    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_identity_provider] = lambda: identity
    app.dependency_overrides[get_workspace] = lambda: workspace

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def auth_headers(auth_user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer token-{auth_user_id}"}
