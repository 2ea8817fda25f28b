"""Local filesystem boundary for files uploaded from the server's disk."""

from __future__ import annotations

from pathlib import Path

from .config import get_config


def resolve_path(path_value: str) -> Path:
    """Expand ``~`` and resolve *path_value* to an absolute path."""
    return Path(path_value).expanduser().resolve()


def enforce_local_access_root(path: Path) -> Path:
    """Reject *path* when it lies outside ``LOCAL_FILE_ACCESS_ROOT``.

    No root configured means no restriction.

    Raises:
        PermissionError: If the path escapes the configured root.
    """
    root_value = get_config().local_file_access_root
    if not root_value:
        return path
    root = resolve_path(root_value)
    if path.is_relative_to(root):
        return path
    raise PermissionError(f"Path '{path}' is outside LOCAL_FILE_ACCESS_ROOT '{root}'")
