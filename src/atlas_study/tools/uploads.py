"""Study material uploads — 3 tools on a FastMCP sub-server."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..errors import make_tool_error
from ..local_path_policy import enforce_local_access_root, resolve_path
from ..persistence import get_store
from ..storage import build_storage_path, extract_storage_path, get_storage_client, validate_upload
from ..types import UserId

logger = logging.getLogger(__name__)
uploads_server = FastMCP("uploads")

mimetypes.add_type("text/markdown", ".md")


@uploads_server.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False, openWorldHint=True))
async def upload_file(
    user_id: UserId,
    file_path: Annotated[str, Field(min_length=1, description="Local path of a PDF, TXT, MD, or DOCX file")],
) -> dict:
    """Upload a study file to storage and record it for the user.

    Returns:
        The upload record (id, file_url, file_name, created_at). Pass its
        ``file_url`` to any study tool.
    """
    try:
        path = enforce_local_access_root(resolve_path(file_path))
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {file_path}")

        mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        validate_upload(path.name, path.stat().st_size, mime)

        storage = get_storage_client()
        storage_path = build_storage_path(user_id, path.name)
        data = await asyncio.to_thread(path.read_bytes)
        await storage.upload(storage_path, data, mime)
        file_url = storage.public_url(storage_path)
        logger.info("Uploaded %s for user %s", path.name, user_id)

        record = await get_store().insert_upload(user_id, file_url=file_url, file_name=path.name)
        if record is None:
            return {"file_url": file_url, "file_name": path.name, "id": None}
        return record.model_dump(mode="json")
    except Exception as exc:
        return make_tool_error(exc)


@uploads_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
async def list_uploads(user_id: UserId) -> dict:
    """List the user's uploaded files, newest first."""
    try:
        uploads = await get_store().list_uploads(user_id)
        return {"uploads": [u.model_dump(mode="json") for u in uploads]}
    except Exception as exc:
        return make_tool_error(exc)


@uploads_server.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True, openWorldHint=True))
async def delete_upload(
    user_id: UserId,
    upload_id: Annotated[str, Field(min_length=1, description="Upload id from list_uploads")],
) -> dict:
    """Delete an upload record and its stored file."""
    try:
        store = get_store()
        upload = await store.get_upload(user_id, upload_id)
        if upload is None:
            raise FileNotFoundError("Upload not found.")

        storage = get_storage_client()
        storage_path = extract_storage_path(upload.file_url, storage.bucket)
        await storage.remove([storage_path])
        await store.delete_upload(user_id, upload_id)
        return {"success": True}
    except Exception as exc:
        return make_tool_error(exc)
