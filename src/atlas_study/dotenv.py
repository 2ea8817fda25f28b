"""Load Atlas credentials from a per-user ``.env`` file.

``~/.config/atlas-study/.env`` lets GROQ_API_KEY and the Supabase
service-role key live outside whatever workspace launches the server.
Values already present in the process environment win.
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_ENV_PATH = Path.home() / ".config" / "atlas-study" / ".env"

_QUOTES = ('"', "'")


def _unquote(value: str) -> str:
    """Drop one pair of matching surrounding quotes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        return value[1:-1]
    return value


def _needs_value(key: str, current: str | None) -> bool:
    """Return True when *key* has no usable value in the environment.

    Blank values and unexpanded references to the key itself
    (``$GROQ_API_KEY``, ``${GROQ_API_KEY}``, ``${GROQ_API_KEY:-}``) count
    as missing; MCP hosts pass these through when the shell never set them.
    """
    if current is None:
        return True
    value = _unquote(current.strip()).strip()
    if not value:
        return True
    if value in (f"${key}", f"${{{key}}}"):
        return True
    return value.startswith(f"${{{key}:-") and value.endswith("}")


def parse_dotenv(path: Path) -> dict[str, str]:
    """Read ``KEY=VALUE`` pairs from *path*.

    Understands quoted values, an optional ``export`` prefix, blank lines and
    ``#`` comments. No variable expansion. A missing file yields ``{}``.
    """
    if not path.is_file():
        return {}

    pairs: dict[str, str] = {}
    for raw_line in path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        line = line.removeprefix("export ")
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        pairs[key] = _unquote(value.strip())
    return pairs


def load_dotenv(path: Path | None = None) -> dict[str, str]:
    """Copy values from *path* into ``os.environ`` for keys that are missing.

    Args:
        path: ``.env`` file to read. Defaults to :data:`DEFAULT_ENV_PATH`.

    Returns:
        The subset of variables that were written to the environment.
    """
    injected: dict[str, str] = {}
    for key, value in parse_dotenv(path or DEFAULT_ENV_PATH).items():
        if _needs_value(key, os.environ.get(key)):
            os.environ[key] = value
            injected[key] = value
    return injected
