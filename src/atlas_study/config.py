"""Server configuration via environment variables."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator

from .errors import CompletionError, ErrorCategory

DEFAULT_GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"
DEFAULT_GROQ_MODEL = "llama-3.1-8b-instant"
DEFAULT_STORAGE_BUCKET = "study-materials"


def _is_env_placeholder(value: str) -> bool:
    """Return True when *value* looks like an unresolved shell placeholder."""
    if value.startswith("${") and value.endswith("}"):
        inner = value[2:-1].strip()
        if ":-" in inner:
            inner = inner.split(":-", 1)[0].strip()
        return bool(inner) and all(ch.isalnum() or ch == "_" for ch in inner)
    if value.startswith("$"):
        inner = value[1:].strip()
        return bool(inner) and all(ch.isalnum() or ch == "_" for ch in inner)
    return False


def _normalize_supabase_url(raw: str) -> str:
    """Normalize SUPABASE_URL from env.

    Strips whitespace and trailing slashes. Unresolved placeholder values
    (``${SUPABASE_URL}``) are treated as unset. Bare hostnames get ``https://``.
    """
    value = raw.strip()
    if not value or _is_env_placeholder(value):
        return ""
    if "://" not in value:
        value = f"https://{value}"
    return value.rstrip("/")


class ServerConfig(BaseModel):
    """Runtime configuration resolved from environment."""

    groq_api_key: str = Field(default="")
    groq_model: str = Field(default=DEFAULT_GROQ_MODEL)
    groq_api_url: str = Field(default=DEFAULT_GROQ_API_URL)
    completion_timeout_seconds: float = Field(default=60.0)
    max_output_tokens: int = Field(default=4096)
    supabase_url: str = Field(default="")
    supabase_service_role_key: str = Field(default="")
    storage_bucket: str = Field(default=DEFAULT_STORAGE_BUCKET)
    max_content_chars: int = Field(default=50_000)
    max_upload_bytes: int = Field(default=10 * 1024 * 1024)
    local_file_access_root: str = Field(default="")
    infra_mutations_enabled: bool = Field(default=False)
    infra_admin_token: str = Field(default="")

    @field_validator("max_output_tokens", "max_content_chars", "max_upload_bytes")
    @classmethod
    def validate_positive_ints(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Configuration values must be >= 1")
        return value

    @field_validator("completion_timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("completion_timeout_seconds must be > 0")
        return value

    @field_validator("storage_bucket")
    @classmethod
    def validate_bucket(cls, value: str) -> str:
        bucket = value.strip().strip("/")
        if not bucket or "/" in bucket:
            raise ValueError(f"Invalid storage bucket name '{value}'")
        return bucket

    @property
    def persistence_enabled(self) -> bool:
        """True when both Supabase URL and service-role key are configured."""
        return bool(self.supabase_url and self.supabase_service_role_key)

    def require_completion_key(self) -> str:
        """Return the Groq API key or fail fast when it is not configured.

        Raises:
            CompletionError: If GROQ_API_KEY is empty.
        """
        if not self.groq_api_key:
            raise CompletionError(
                "GROQ_API_KEY is not configured.",
                category=ErrorCategory.API_KEY_MISSING,
            )
        return self.groq_api_key

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Build config from environment variables."""
        supabase_url = os.getenv("SUPABASE_URL", "") or os.getenv("NEXT_PUBLIC_SUPABASE_URL", "")
        return cls(
            groq_api_key=os.getenv("GROQ_API_KEY", "").strip(),
            groq_model=os.getenv("GROQ_MODEL", DEFAULT_GROQ_MODEL),
            groq_api_url=os.getenv("GROQ_API_URL", DEFAULT_GROQ_API_URL),
            completion_timeout_seconds=float(os.getenv("ATLAS_COMPLETION_TIMEOUT", "60.0")),
            max_output_tokens=int(os.getenv("ATLAS_MAX_OUTPUT_TOKENS", "4096")),
            supabase_url=_normalize_supabase_url(supabase_url),
            supabase_service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY", "").strip(),
            storage_bucket=os.getenv("ATLAS_STORAGE_BUCKET", DEFAULT_STORAGE_BUCKET),
            max_content_chars=int(os.getenv("ATLAS_MAX_CONTENT_CHARS", "50000")),
            max_upload_bytes=int(os.getenv("ATLAS_MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))),
            local_file_access_root=os.getenv("LOCAL_FILE_ACCESS_ROOT", ""),
            infra_mutations_enabled=os.getenv("INFRA_MUTATIONS_ENABLED", "").lower() in ("1", "true", "yes"),
            infra_admin_token=os.getenv("INFRA_ADMIN_TOKEN", ""),
        )


# Singleton, created on first access.
_config: ServerConfig | None = None


def get_config() -> ServerConfig:
    """Return the global config singleton, creating it on first access.

    Loads ``~/.config/atlas-study/.env`` before reading env vars.
    Process environment always takes precedence over the config file.
    """
    global _config
    if _config is None:
        import logging

        from .dotenv import load_dotenv

        injected = load_dotenv()
        if injected:
            logger = logging.getLogger(__name__)
            logger.info(
                "Loaded %d var(s) from config: %s",
                len(injected),
                ", ".join(injected.keys()),
            )
        _config = ServerConfig.from_env()
    return _config


def update_config(**overrides: object) -> ServerConfig:
    """Patch the live config (used by ``infra_configure`` tool)."""
    global _config
    cfg = get_config()
    data = cfg.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    _config = ServerConfig(**data)
    return _config
