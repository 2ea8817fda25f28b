"""Infrastructure tools — 2 tools on a FastMCP sub-server."""

from __future__ import annotations

from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..client import close_completion_client
from ..config import get_config, update_config
from ..errors import make_tool_error

infra_server = FastMCP("infra")
_SENSITIVE_CONFIG_FIELDS = {
    "groq_api_key",
    "supabase_service_role_key",
    "infra_admin_token",
}


def _redacted_config() -> dict:
    """Return runtime config with secret-bearing fields removed."""
    cfg = get_config()
    data = cfg.model_dump(exclude=_SENSITIVE_CONFIG_FIELDS)
    data["completion_key_configured"] = bool(cfg.groq_api_key)
    data["persistence_enabled"] = cfg.persistence_enabled
    return data


def _enforce_mutation_policy(auth_token: str | None) -> None:
    """Gate mutating infra operations behind explicit policy + optional token."""
    cfg = get_config()
    if not cfg.infra_mutations_enabled:
        raise PermissionError(
            "Infra mutations are disabled by policy. "
            "Set INFRA_MUTATIONS_ENABLED=true to enable mutating infra tools."
        )
    if cfg.infra_admin_token and auth_token != cfg.infra_admin_token:
        raise PermissionError(
            "Invalid or missing infra auth token for mutating operation."
        )


@infra_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=False))
async def infra_config() -> dict:
    """Show the active runtime configuration with secrets redacted."""
    return {"current_config": _redacted_config()}


@infra_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def infra_configure(
    model: Annotated[str | None, Field(description="Groq model ID, e.g. llama-3.1-8b-instant")] = None,
    max_output_tokens: Annotated[int | None, Field(ge=1, description="Completion token cap")] = None,
    completion_timeout_seconds: Annotated[float | None, Field(gt=0, description="Per-request timeout")] = None,
    auth_token: Annotated[str | None, Field(
        description="Optional infra auth token (required when INFRA_ADMIN_TOKEN is configured)",
    )] = None,
) -> dict:
    """Reconfigure the completion backend at runtime.

    Changes take effect for the next tool call: the shared completion
    client is closed and rebuilt from the new config on first use.

    Returns:
        Dict with current_config (secrets redacted).
    """
    try:
        overrides: dict[str, object] = {}
        if model is not None:
            overrides["groq_model"] = model
        if max_output_tokens is not None:
            overrides["max_output_tokens"] = max_output_tokens
        if completion_timeout_seconds is not None:
            overrides["completion_timeout_seconds"] = completion_timeout_seconds

        if overrides:
            _enforce_mutation_policy(auth_token)
            update_config(**overrides)
            await close_completion_client()

        return {"current_config": _redacted_config()}
    except Exception as exc:
        return make_tool_error(exc)
