"""Shared test fixtures for atlas-study."""

from __future__ import annotations

import io
import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest


def unwrap_tool(tool: Any) -> Any:
    """Extract the raw coroutine from a FastMCP FunctionTool, if wrapped.

    FastMCP 2.x wraps @server.tool functions in FunctionTool (not callable).
    FastMCP 3.x preserves the original function. This helper works with both.
    """
    return getattr(tool, "fn", tool)


def make_text_pdf(lines: list[str]) -> bytes:
    """Build a one-page PDF that draws *lines* in Helvetica."""
    ops = ["BT", "/F1 12 Tf", "14 TL", "72 720 Td"]
    for line in lines:
        escaped = line.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
        ops.append(f"({escaped}) Tj T*")
    ops.append("ET")
    stream = "\n".join(ops).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Resources << /Font << /F1 5 0 R >> >> /Contents 4 0 R >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = io.BytesIO()
    out.write(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(out.tell())
        out.write(b"%d 0 obj\n" % number + body + b"\nendobj\n")
    xref_at = out.tell()
    out.write(b"xref\n0 %d\n" % (len(objects) + 1))
    out.write(b"0000000000 65535 f \n")
    for offset in offsets:
        out.write(b"%010d 00000 n \n" % offset)
    out.write(b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1))
    out.write(b"startxref\n%d\n%%%%EOF\n" % xref_at)
    return out.getvalue()


def completion_body(content: str) -> dict:
    """An OpenAI-compatible chat-completion response carrying *content*."""
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


class FakeObjectStore:
    """In-memory stand-in for StorageClient (bucket + async download)."""

    def __init__(self, files: dict[str, bytes] | None = None, bucket: str = "study-materials"):
        self.bucket = bucket
        self.files = dict(files or {})
        self.downloads: list[str] = []

    async def download(self, path: str) -> bytes:
        self.downloads.append(path)
        if path not in self.files:
            raise FileNotFoundError(f"Object not found: {path}")
        return self.files[path]


@pytest.fixture(autouse=True, scope="session")
def _unwrap_fastmcp_tools():
    """Patch tool modules so FunctionTool objects become directly callable."""
    import importlib
    import pkgutil

    import atlas_study.tools as tools_pkg

    modules = []
    for info in pkgutil.walk_packages(tools_pkg.__path__, tools_pkg.__name__ + "."):
        modules.append(importlib.import_module(info.name))

    for mod in modules:
        for name in list(vars(mod)):
            obj = getattr(mod, name, None)
            if obj is not None and hasattr(obj, "fn") and not callable(obj):
                setattr(mod, name, obj.fn)


@pytest.fixture(autouse=True)
def _set_dummy_api_key(monkeypatch):
    """Ensure tests never hit the real Groq API."""
    monkeypatch.setenv("GROQ_API_KEY", "gsk-test-key-not-real")


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Tests run without persistence or infra policy unless they opt in."""
    for var in (
        "SUPABASE_URL",
        "NEXT_PUBLIC_SUPABASE_URL",
        "SUPABASE_SERVICE_ROLE_KEY",
        "GROQ_MODEL",
        "LOCAL_FILE_ACCESS_ROOT",
        "INFRA_MUTATIONS_ENABLED",
        "INFRA_ADMIN_TOKEN",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def _isolate_dotenv(tmp_path, monkeypatch):
    """Prevent tests from loading the user's real ~/.config/atlas-study/.env."""
    monkeypatch.setattr(
        "atlas_study.dotenv.DEFAULT_ENV_PATH",
        tmp_path / "nonexistent.env",
    )


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Drop the config and collaborator singletons around each test."""
    import atlas_study.client as client_mod
    import atlas_study.config as cfg_mod
    import atlas_study.persistence as persistence_mod
    import atlas_study.storage as storage_mod

    cfg_mod._config = None
    client_mod._client = None
    storage_mod._client = None
    persistence_mod._store = None
    yield
    cfg_mod._config = None
    client_mod._client = None
    storage_mod._client = None
    persistence_mod._store = None


@pytest.fixture()
def clean_config():
    """Reset the config singleton between tests."""
    import atlas_study.config as cfg_mod

    cfg_mod._config = None
    yield
    cfg_mod._config = None


@pytest.fixture()
def fake_storage():
    return FakeObjectStore()


@pytest.fixture()
def mock_completion():
    """A CompletionClient stand-in whose ``complete`` is an AsyncMock."""
    client = MagicMock()
    client.complete = AsyncMock(return_value="")
    return client


@pytest.fixture()
def mock_tool_collaborators(mock_completion):
    """Patch the process-wide collaborators the study/chat tools fetch."""
    store = MagicMock()
    store.save_session = AsyncMock(return_value=None)
    with (
        patch("atlas_study.tools.study.get_completion_client", return_value=mock_completion),
        patch("atlas_study.tools.study.get_store", return_value=store),
        patch("atlas_study.tools.chat.get_completion_client", return_value=mock_completion),
    ):
        yield {"completion": mock_completion, "store": store}


def json_transport(handler) -> httpx.MockTransport:
    """Wrap *handler* (request -> (status, body)) as an httpx MockTransport."""

    def _respond(request: httpx.Request) -> httpx.Response:
        status, body = handler(request)
        if isinstance(body, (dict, list)):
            return httpx.Response(status, content=json.dumps(body), headers={"content-type": "application/json"})
        return httpx.Response(status, content=body or b"")

    return httpx.MockTransport(_respond)
