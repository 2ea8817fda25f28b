"""Supabase (PostgREST) persistence for study sessions, quiz history, and uploads.

All access uses the service-role key from config. When Supabase is not
configured the store is disabled: writes return None and reads return
empty lists, so the study tools still work without a database.
"""

from __future__ import annotations

import logging
from datetime import datetime

import httpx

from .config import ServerConfig, get_config
from .errors import StorageError
from .models.analytics import UploadRecord
from .models.content import ResolvedContent
from .types import SessionContentType

logger = logging.getLogger(__name__)

TITLE_MAX_CHARS = 80
ORIGINAL_CONTENT_MAX_CHARS = 10_000
MAX_SESSION_MINUTES = 1440


def session_title(text: str, preferred: str | None = None) -> str:
    """Session title: *preferred* when non-empty, else the first 80 chars of the text."""
    if preferred and preferred.strip():
        return preferred
    return text.strip()[:TITLE_MAX_CHARS]


def build_result_data(
    result: dict,
    resolved: ResolvedContent,
    *,
    keep_original: bool = False,
) -> dict:
    """Attach the content reference stored alongside a generated artifact.

    File sources keep ``file_url``; pasted text keeps ``original_content``
    (first 10,000 characters) so the session can be reopened later. With
    *keep_original* the text is stored for file sources as well.
    """
    data = dict(result)
    from_file = resolved.source == "file" and bool(resolved.file_url)
    if from_file:
        data["file_url"] = resolved.file_url
    if keep_original or not from_file:
        data["original_content"] = resolved.text.strip()[:ORIGINAL_CONTENT_MAX_CHARS]
    return data


class SupabaseStore:
    """Async PostgREST client for the Atlas tables."""

    def __init__(
        self,
        base_url: str = "",
        service_key: str = "",
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.enabled = bool(base_url and service_key)
        self._http: httpx.AsyncClient | None = None
        if self.enabled:
            self._http = httpx.AsyncClient(
                base_url=f"{base_url.rstrip('/')}/rest/v1",
                headers={
                    "Authorization": f"Bearer {service_key}",
                    "apikey": service_key,
                },
                transport=transport,
                timeout=timeout,
            )

    @classmethod
    def from_config(cls, cfg: ServerConfig) -> SupabaseStore:
        return cls(cfg.supabase_url, cfg.supabase_service_role_key)

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict | None = None,
        json: dict | list | None = None,
        prefer: str | None = None,
    ) -> list[dict]:
        """Run one PostgREST request and return the decoded rows."""
        headers = {"Prefer": prefer} if prefer else {}
        resp = await self._http.request(method, f"/{table}", params=params, json=json, headers=headers)
        if resp.is_error:
            raise StorageError(f"Database error: {resp.status_code} {resp.text}")
        if not resp.content:
            return []
        body = resp.json()
        return body if isinstance(body, list) else [body]

    async def ensure_user(self, user_id: str, email: str = "") -> None:
        """Upsert the ``users`` row (the signup trigger may not have run yet)."""
        if not self.enabled:
            return
        await self._request(
            "POST", "users",
            params={"on_conflict": "id"},
            json={"id": user_id, "email": email},
            prefer="resolution=merge-duplicates",
        )

    async def save_session(
        self,
        user_id: str,
        *,
        title: str,
        content_type: SessionContentType,
        result_data: dict,
    ) -> str | None:
        """Insert a ``study_sessions`` row.

        Non-fatal: failures are logged and return None, since the generated
        artifact is still valid even if it cannot be kept for history.

        Returns:
            The new session id, or None if disabled/failed.
        """
        if not self.enabled:
            return None
        try:
            await self.ensure_user(user_id)
            rows = await self._request(
                "POST", "study_sessions",
                params={"select": "id"},
                json={
                    "user_id": user_id,
                    "title": title,
                    "content_type": content_type,
                    "result_data": result_data,
                },
                prefer="return=representation",
            )
            return str(rows[0]["id"]) if rows else None
        except Exception as exc:
            logger.warning("Session persistence failed (non-fatal): %s", exc)
            return None

    async def update_session_duration(
        self, user_id: str, session_id: str, duration_minutes: float
    ) -> None:
        """Set ``duration_minutes`` (rounded) on one of the user's sessions.

        Raises:
            ValueError: If the duration is outside 0..1440 minutes.
        """
        if duration_minutes < 0 or duration_minutes > MAX_SESSION_MINUTES:
            raise ValueError(f"duration_minutes must be between 0 and {MAX_SESSION_MINUTES}.")
        if not self.enabled:
            return
        await self._request(
            "PATCH", "study_sessions",
            params={"id": f"eq.{session_id}", "user_id": f"eq.{user_id}"},
            json={"duration_minutes": round(duration_minutes)},
        )

    async def record_quiz_result(
        self,
        user_id: str,
        *,
        score: int,
        total_questions: int,
        session_id: str | None = None,
    ) -> str | None:
        """Insert a ``quiz_history`` row for a completed attempt.

        Raises:
            ValueError: If score/total_questions are inconsistent.
        """
        if score < 0 or total_questions <= 0 or score > total_questions:
            raise ValueError("Invalid score or total_questions values.")
        if not self.enabled:
            return None
        await self.ensure_user(user_id)
        rows = await self._request(
            "POST", "quiz_history",
            params={"select": "id"},
            json={
                "user_id": user_id,
                "session_id": session_id,
                "score": score,
                "total_questions": total_questions,
            },
            prefer="return=representation",
        )
        return str(rows[0]["id"]) if rows else None

    async def list_session_timestamps(
        self, user_id: str, *, since: datetime | None = None
    ) -> list[str]:
        """Return ``created_at`` of the user's sessions, oldest first."""
        if not self.enabled:
            return []
        params: dict[str, str] = {
            "select": "created_at",
            "user_id": f"eq.{user_id}",
            "order": "created_at.asc",
        }
        if since is not None:
            params["created_at"] = f"gte.{since.isoformat()}"
        rows = await self._request("GET", "study_sessions", params=params)
        return [row["created_at"] for row in rows if row.get("created_at")]

    async def insert_upload(self, user_id: str, *, file_url: str, file_name: str) -> UploadRecord | None:
        if not self.enabled:
            return None
        await self.ensure_user(user_id)
        rows = await self._request(
            "POST", "uploads",
            json={"user_id": user_id, "file_url": file_url, "file_name": file_name},
            prefer="return=representation",
        )
        return UploadRecord.model_validate(rows[0]) if rows else None

    async def list_uploads(self, user_id: str) -> list[UploadRecord]:
        """Return the user's uploads, newest first."""
        if not self.enabled:
            return []
        rows = await self._request(
            "GET", "uploads",
            params={"select": "*", "user_id": f"eq.{user_id}", "order": "created_at.desc"},
        )
        return [UploadRecord.model_validate(row) for row in rows]

    async def get_upload(self, user_id: str, upload_id: str) -> UploadRecord | None:
        if not self.enabled:
            return None
        rows = await self._request(
            "GET", "uploads",
            params={"select": "*", "id": f"eq.{upload_id}", "user_id": f"eq.{user_id}"},
        )
        return UploadRecord.model_validate(rows[0]) if rows else None

    async def delete_upload(self, user_id: str, upload_id: str) -> None:
        if not self.enabled:
            return
        await self._request(
            "DELETE", "uploads",
            params={"id": f"eq.{upload_id}", "user_id": f"eq.{user_id}"},
        )

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()


_store: SupabaseStore | None = None


def get_store() -> SupabaseStore:
    """Return the process-wide store, creating it on first access."""
    global _store
    if _store is None:
        _store = SupabaseStore.from_config(get_config())
    return _store


async def close_store() -> None:
    global _store
    if _store is not None:
        await _store.aclose()
        _store = None
