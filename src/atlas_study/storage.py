"""Object-store collaborator — Supabase Storage over its REST API.

Study files live in a single bucket (``ServerConfig.storage_bucket``,
``study-materials`` by default) under ``<user_id>/<epoch_ms>_<safe_name>``.
The same bucket name is used to build public URLs at upload time and to
turn those URLs back into storage paths at resolution time.
"""

from __future__ import annotations

import logging
import re
import time
from pathlib import PurePosixPath
from urllib.parse import quote, unquote, urlparse

import httpx

from .config import ServerConfig, get_config
from .errors import ErrorCategory, ResolutionError, StorageError, UploadRejected

logger = logging.getLogger(__name__)

ALLOWED_UPLOAD_MIME_TYPES = frozenset({
    "application/pdf",
    "text/plain",
    "text/markdown",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
})
ALLOWED_UPLOAD_EXTENSIONS = frozenset({"pdf", "txt", "md", "docx"})

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def extract_storage_path(url: str, bucket: str | None = None) -> str:
    """Turn a public object URL into a bucket-relative storage path.

    ``https://x.supabase.co/storage/v1/object/public/study-materials/u1/f.pdf``
    becomes ``u1/f.pdf``. Input that is already a bare path (no ``http``
    prefix) is returned unchanged.

    Raises:
        ResolutionError: If no storage path can be derived from the URL.
    """
    bucket = bucket or get_config().storage_bucket
    marker = f"/storage/v1/object/public/{bucket}/"
    idx = url.find(marker)
    if idx != -1:
        return unquote(url[idx + len(marker):])

    if not url.startswith("http"):
        return url

    parts = urlparse(url).path.split(f"/{bucket}/")
    if len(parts) == 2:
        return unquote(parts[1])

    raise ResolutionError(
        "Could not determine storage path from the provided file URL.",
        category=ErrorCategory.STORAGE_PATH_INVALID,
    )


def validate_upload(filename: str, size: int, mime_type: str | None = None) -> None:
    """Reject uploads that are too large or of an unsupported type.

    A file passes the type check when either its MIME type or its
    extension is on the allow-list.

    Raises:
        UploadRejected: With category FILE_TOO_LARGE or FILE_UNSUPPORTED.
    """
    max_bytes = get_config().max_upload_bytes
    if size > max_bytes:
        raise UploadRejected(
            f"File too large. Maximum size is {max_bytes // (1024 * 1024)} MB.",
            category=ErrorCategory.FILE_TOO_LARGE,
        )
    ext = PurePosixPath(filename).suffix.lower().lstrip(".")
    if (mime_type or "") not in ALLOWED_UPLOAD_MIME_TYPES and ext not in ALLOWED_UPLOAD_EXTENSIONS:
        raise UploadRejected(
            "Unsupported file type. Please upload PDF, TXT, MD, or DOCX.",
            category=ErrorCategory.FILE_UNSUPPORTED,
        )


def build_storage_path(user_id: str, filename: str, *, now_ms: int | None = None) -> str:
    """Return ``<user_id>/<epoch_ms>_<safe_name>`` for a new upload."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    safe_name = _UNSAFE_NAME_CHARS.sub("_", filename)
    return f"{user_id}/{stamp}_{safe_name}"


def _error_message(response: httpx.Response) -> str:
    """Best-effort extraction of a Supabase error message."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


class StorageClient:
    """Thin async client for one Supabase Storage bucket.

    One instance is shared per process (see :func:`get_storage_client`);
    tests construct their own with an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        base_url: str,
        service_key: str,
        bucket: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 60.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self._http = httpx.AsyncClient(
            base_url=f"{self.base_url}/storage/v1",
            headers={"Authorization": f"Bearer {service_key}", "apikey": service_key},
            transport=transport,
            timeout=timeout,
        )

    @classmethod
    def from_config(cls, cfg: ServerConfig) -> StorageClient:
        """Build a client from config, failing fast when Supabase is unset."""
        if not cfg.persistence_enabled:
            raise StorageError(
                "Supabase storage is not configured — set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY."
            )
        return cls(cfg.supabase_url, cfg.supabase_service_role_key, cfg.storage_bucket)

    def _object_url(self, path: str) -> str:
        return f"/object/{self.bucket}/{quote(path)}"

    def public_url(self, path: str) -> str:
        """Return the public URL for *path* (no request is made)."""
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(path)}"

    async def download(self, path: str) -> bytes:
        """Fetch an object's bytes.

        Raises:
            StorageError: On a non-success response.
        """
        resp = await self._http.get(self._object_url(path))
        if resp.is_error:
            raise StorageError(f"{resp.status_code} {_error_message(resp)}")
        logger.info("Downloaded %s/%s (%d bytes)", self.bucket, path, len(resp.content))
        return resp.content

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Store *data* at *path* without overwriting. Returns the path."""
        resp = await self._http.post(
            self._object_url(path),
            content=data,
            headers={"Content-Type": content_type, "x-upsert": "false"},
        )
        if resp.is_error:
            raise StorageError(
                f"Storage error: {_error_message(resp)}",
                category=ErrorCategory.UNKNOWN,
            )
        logger.info("Uploaded %s/%s (%d bytes)", self.bucket, path, len(data))
        return path

    async def remove(self, paths: list[str]) -> None:
        """Delete objects by path."""
        resp = await self._http.request(
            "DELETE", f"/object/{self.bucket}", json={"prefixes": paths},
        )
        if resp.is_error:
            raise StorageError(
                f"Storage error: {_error_message(resp)}",
                category=ErrorCategory.UNKNOWN,
            )

    async def aclose(self) -> None:
        await self._http.aclose()


_client: StorageClient | None = None


def get_storage_client() -> StorageClient:
    """Return the process-wide storage client, creating it on first access."""
    global _client
    if _client is None:
        _client = StorageClient.from_config(get_config())
    return _client


async def close_storage_client() -> None:
    """Close the shared client (server lifespan shutdown)."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
