"""Tests for the upload MCP tools."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

import atlas_study.tools.uploads as uploads_mod
from atlas_study.models.analytics import UploadRecord
from tests.conftest import unwrap_tool

upload_file = unwrap_tool(uploads_mod.upload_file)
list_uploads = unwrap_tool(uploads_mod.list_uploads)
delete_upload = unwrap_tool(uploads_mod.delete_upload)

PUBLIC = "https://abc.supabase.co/storage/v1/object/public/study-materials"


def _record(path: str = "u1/1700_notes.pdf") -> UploadRecord:
    return UploadRecord(
        id="up-1", user_id="u1", file_url=f"{PUBLIC}/{path}",
        file_name="notes.pdf", created_at="2026-03-10T10:00:00Z",
    )


@pytest.fixture()
def collaborators():
    storage = MagicMock()
    storage.bucket = "study-materials"
    storage.upload = AsyncMock(side_effect=lambda path, data, content_type: path)
    storage.remove = AsyncMock()
    storage.public_url = MagicMock(side_effect=lambda path: f"{PUBLIC}/{path}")

    store = MagicMock()
    store.insert_upload = AsyncMock(return_value=_record())
    store.list_uploads = AsyncMock(return_value=[_record()])
    store.get_upload = AsyncMock(return_value=_record())
    store.delete_upload = AsyncMock()

    with (
        patch.object(uploads_mod, "get_storage_client", return_value=storage),
        patch.object(uploads_mod, "get_store", return_value=store),
    ):
        yield {"storage": storage, "store": store}


class TestUploadFile:
    @pytest.mark.asyncio
    async def test_uploads_and_records(self, tmp_path, collaborators):
        path = tmp_path / "notes.pdf"
        path.write_bytes(b"%PDF-1.4 fake")

        out = await upload_file(user_id="u1", file_path=str(path))

        assert out["id"] == "up-1"
        storage_path, data, content_type = collaborators["storage"].upload.await_args.args
        assert storage_path.startswith("u1/") and storage_path.endswith("_notes.pdf")
        assert data == b"%PDF-1.4 fake"
        assert content_type == "application/pdf"
        kwargs = collaborators["store"].insert_upload.await_args.kwargs
        assert kwargs["file_url"] == f"{PUBLIC}/{storage_path}"
        assert kwargs["file_name"] == "notes.pdf"

    @pytest.mark.asyncio
    async def test_file_is_read_in_worker_thread(self, tmp_path, collaborators):
        path = tmp_path / "notes.md"
        path.write_bytes(b"# Enzymes")
        calls = []

        async def fake_to_thread(func, *args):
            calls.append(func)
            return func(*args)

        with patch.object(uploads_mod.asyncio, "to_thread", new=fake_to_thread):
            await upload_file(user_id="u1", file_path=str(path))

        assert [f.__name__ for f in calls] == ["read_bytes"]
        assert collaborators["storage"].upload.await_args.args[1] == b"# Enzymes"

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path, collaborators):
        out = await upload_file(user_id="u1", file_path=str(tmp_path / "nope.pdf"))
        assert out["category"] == "FILE_NOT_FOUND"
        collaborators["storage"].upload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unsupported_type(self, tmp_path, collaborators):
        path = tmp_path / "slides.pptx"
        path.write_bytes(b"x")
        out = await upload_file(user_id="u1", file_path=str(path))
        assert out["category"] == "FILE_UNSUPPORTED"

    @pytest.mark.asyncio
    async def test_too_large(self, tmp_path, monkeypatch, collaborators):
        monkeypatch.setenv("ATLAS_MAX_UPLOAD_BYTES", "4")
        path = tmp_path / "notes.txt"
        path.write_bytes(b"12345")
        out = await upload_file(user_id="u1", file_path=str(path))
        assert out["category"] == "FILE_TOO_LARGE"

    @pytest.mark.asyncio
    async def test_outside_access_root(self, tmp_path, monkeypatch, collaborators):
        root = tmp_path / "allowed"
        root.mkdir()
        monkeypatch.setenv("LOCAL_FILE_ACCESS_ROOT", str(root))
        path = tmp_path / "notes.txt"
        path.write_text("secret")

        out = await upload_file(user_id="u1", file_path=str(path))

        assert out["category"] == "INVALID_INPUT"
        assert "LOCAL_FILE_ACCESS_ROOT" in out["error"]


class TestListAndDelete:
    @pytest.mark.asyncio
    async def test_list(self, collaborators):
        out = await list_uploads(user_id="u1")
        assert [u["id"] for u in out["uploads"]] == ["up-1"]

    @pytest.mark.asyncio
    async def test_delete_removes_object_then_row(self, collaborators):
        out = await delete_upload(user_id="u1", upload_id="up-1")
        assert out == {"success": True}
        collaborators["storage"].remove.assert_awaited_once_with(["u1/1700_notes.pdf"])
        collaborators["store"].delete_upload.assert_awaited_once_with("u1", "up-1")

    @pytest.mark.asyncio
    async def test_delete_unknown(self, collaborators):
        collaborators["store"].get_upload.return_value = None
        out = await delete_upload(user_id="u1", upload_id="nope")
        assert out["category"] == "FILE_NOT_FOUND"
        collaborators["storage"].remove.assert_not_awaited()
