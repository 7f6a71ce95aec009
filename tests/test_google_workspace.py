"""Drive / Docs / Sheets REST calls against httpx.MockTransport."""

import json

import httpx
import pytest

from contractdesk.core.exceptions import UpstreamError
from contractdesk.services.google_workspace import (
    DriveFile,
    GoogleWorkspace,
    build_multipart_related,
)
from tests.conftest import make_settings


class Recorder:
    """Routes requests to canned responses keyed by (method, path) and records them."""

    def __init__(self, routes: dict[tuple[str, str], httpx.Response]):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, text=f"no route for {key}")
        return self.routes[key]


async def _workspace(recorder: Recorder, **overrides) -> tuple[GoogleWorkspace, httpx.AsyncClient]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    ws = GoogleWorkspace(make_settings(**overrides), http)
    await ws.authorize()
    return ws, http


class TestSheets:
    @pytest.mark.asyncio
    async def test_append_row(self):
        path = "/v4/spreadsheets/sheet-1/values/Contract Log!A1:append"
        rec = Recorder({
            ("POST", path): httpx.Response(200, json={"updates": {"updatedRange": "'Contract Log'!A5:H5"}}),
        })
        ws, http = await _workspace(rec, google_sheet_tab_name="Contract Log")
        async with http:
            updated = await ws.append_sheet_row(["id", "김직원"])

        assert updated == "'Contract Log'!A5:H5"
        request = rec.requests[0]
        assert request.headers["Authorization"] == "Bearer static-google-token"
        assert request.url.params["valueInputOption"] == "USER_ENTERED"
        assert request.url.params["insertDataOption"] == "INSERT_ROWS"
        assert json.loads(request.content) == {"values": [["id", "김직원"]]}

    @pytest.mark.asyncio
    async def test_failure_names_the_stage(self):
        rec = Recorder({})
        ws, http = await _workspace(rec)
        async with http:
            with pytest.raises(UpstreamError) as exc_info:
                await ws.append_sheet_row(["x"])
        assert exc_info.value.stage == "sheet_append"
        assert "status=404" in exc_info.value.detail


class TestFolders:
    @pytest.mark.asyncio
    async def test_existing_folder_is_reused(self):
        rec = Recorder({
            ("GET", "/drive/v3/files"): httpx.Response(200, json={"files": [{"id": "f1", "name": "김직원"}]}),
        })
        ws, http = await _workspace(rec)
        async with http:
            folder = await ws.find_or_create_folder("root", "김직원")

        assert folder == DriveFile(id="f1", name="김직원")
        q = rec.requests[0].url.params["q"]
        assert "'root' in parents" in q
        assert "name = '김직원'" in q
        assert "mimeType = 'application/vnd.google-apps.folder'" in q
        assert "trashed = false" in q
        assert len(rec.requests) == 1

    @pytest.mark.asyncio
    async def test_missing_folder_is_created(self):
        rec = Recorder({
            ("GET", "/drive/v3/files"): httpx.Response(200, json={"files": []}),
            ("POST", "/drive/v3/files"): httpx.Response(200, json={"id": "new", "name": "김직원"}),
        })
        ws, http = await _workspace(rec)
        async with http:
            folder = await ws.find_or_create_folder("root", "김직원")

        assert folder.id == "new"
        body = json.loads(rec.requests[1].content)
        assert body == {"name": "김직원", "mimeType": "application/vnd.google-apps.folder", "parents": ["root"]}

    @pytest.mark.asyncio
    async def test_quotes_in_names_are_escaped(self):
        rec = Recorder({("GET", "/drive/v3/files"): httpx.Response(200, json={"files": []})})
        ws, http = await _workspace(rec)
        async with http:
            await ws.find_files_by_name("root", "O'Brien-20240301.pdf")
        assert "name = 'O\\'Brien-20240301.pdf'" in rec.requests[0].url.params["q"]


class TestCopy:
    @pytest.mark.asyncio
    async def test_missing_template_explains_sharing(self):
        rec = Recorder({("POST", "/drive/v3/files/tpl/copy"): httpx.Response(404, text="File not found")})
        ws, http = await _workspace(rec)
        async with http:
            with pytest.raises(UpstreamError) as exc_info:
                await ws.copy_file("tpl", "contract_adjuster_홍길동_2024-03-01", "folder")
        assert exc_info.value.stage == "template_copy"
        assert "not shared" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_quota_exceeded(self):
        rec = Recorder({
            ("POST", "/drive/v3/files/tpl/copy"): httpx.Response(403, text='{"reason": "storageQuotaExceeded"}'),
        })
        ws, http = await _workspace(rec)
        async with http:
            with pytest.raises(UpstreamError) as exc_info:
                await ws.copy_file("tpl", "t", "folder")
        assert "quota" in exc_info.value.detail


class TestDocs:
    @pytest.mark.asyncio
    async def test_replace_is_one_case_sensitive_batch(self):
        rec = Recorder({("POST", "/v1/documents/doc1:batchUpdate"): httpx.Response(200, json={})})
        ws, http = await _workspace(rec)
        async with http:
            await ws.replace_placeholders("doc1", {"customer_name": "홍길동", "now_date": "2024-03-01"})

        assert len(rec.requests) == 1
        requests = json.loads(rec.requests[0].content)["requests"]
        assert requests[0] == {
            "replaceAllText": {
                "containsText": {"text": "{{customer_name}}", "matchCase": True},
                "replaceText": "홍길동",
            }
        }
        assert requests[1]["replaceAllText"]["containsText"]["text"] == "{{now_date}}"


class TestUpload:
    def test_multipart_body(self):
        body, boundary = build_multipart_related({"name": "홍길동-20240301.pdf"}, b"%PDF-1.7", "application/pdf")
        text = body.decode("utf-8")
        assert text.startswith(f"--{boundary}\r\nContent-Type: application/json; charset=UTF-8")
        assert '"name": "홍길동-20240301.pdf"' in text
        assert "Content-Type: application/pdf\r\n\r\n%PDF-1.7" in text
        assert text.endswith(f"--{boundary}--")

    @pytest.mark.asyncio
    async def test_upload_uses_multipart_related(self):
        rec = Recorder({
            ("POST", "/upload/drive/v3/files"): httpx.Response(
                200, json={"id": "pdf1", "name": "a.pdf", "webViewLink": "https://drive/x"},
            ),
        })
        ws, http = await _workspace(rec)
        async with http:
            uploaded = await ws.upload_pdf("folder", "a.pdf", b"%PDF")

        assert uploaded.link == "https://drive/x"
        request = rec.requests[0]
        assert request.url.params["uploadType"] == "multipart"
        assert request.headers["Content-Type"].startswith("multipart/related; boundary=")


def test_link_falls_back_to_file_view_url():
    assert DriveFile(id="abc").link == "https://drive.google.com/file/d/abc/view"


def _refuse(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


class TestTransportFailures:
    @pytest.mark.asyncio
    async def test_export_connection_error_names_the_stage(self):
        ws, http = await _workspace(_refuse)
        async with http:
            with pytest.raises(UpstreamError) as exc_info:
                await ws.export_pdf("doc-1")
        assert exc_info.value.stage == "pdf_export"
        assert "connection refused" in exc_info.value.detail
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_copy_connection_error_names_the_stage(self):
        ws, http = await _workspace(_refuse)
        async with http:
            with pytest.raises(UpstreamError) as exc_info:
                await ws.copy_file("tpl", "copy")
        assert exc_info.value.stage == "template_copy"

    @pytest.mark.asyncio
    async def test_read_timeout_names_the_stage(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        ws, http = await _workspace(handler)
        async with http:
            with pytest.raises(UpstreamError) as exc_info:
                await ws.delete_file("copy-1", stage="temp_cleanup")
        assert exc_info.value.stage == "temp_cleanup"

    @pytest.mark.asyncio
    async def test_non_json_success_body_names_the_stage(self):
        path = "/v4/spreadsheets/sheet-1/values/Sheet1!A1:append"
        rec = Recorder({("POST", path): httpx.Response(200, text="<html>gateway</html>")})
        ws, http = await _workspace(rec)
        async with http:
            with pytest.raises(UpstreamError) as exc_info:
                await ws.append_sheet_row(["x"])
        assert exc_info.value.stage == "sheet_append"

    @pytest.mark.asyncio
    async def test_created_folder_without_id(self):
        rec = Recorder({
            ("GET", "/drive/v3/files"): httpx.Response(200, json={"files": []}),
            ("POST", "/drive/v3/files"): httpx.Response(200, json={"name": "김직원"}),
        })
        ws, http = await _workspace(rec)
        async with http:
            with pytest.raises(UpstreamError) as exc_info:
                await ws.find_or_create_folder("root", "김직원")
        assert exc_info.value.stage == "folder_create"


@pytest.mark.asyncio
async def test_calls_before_authorize_are_rejected():
    async with httpx.AsyncClient(transport=httpx.MockTransport(Recorder({}))) as http:
        ws = GoogleWorkspace(make_settings(), http)
        with pytest.raises(RuntimeError):
            await ws.export_pdf("x")
