"""Display helpers for listing columns."""

from __future__ import annotations

KB = 1024
MB = 1024 * KB
GB = 1024 * MB

_OWNER_LABELS = {
    "rwx": "Full Access",
    "rw-": "Read & Write",
    "r--": "Read Only",
    "--x": "Execute Only",
}


def format_size(size: int | None) -> str:
    """Human-readable byte count, ``-`` when unknown."""
    if size is None:
        return "-"
    if size < KB:
        return f"{size} B"
    if size < MB:
        return f"{size / KB:.1f} KB"
    if size < GB:
        return f"{size / MB:.1f} MB"
    return f"{size / GB:.2f} GB"


def permission_label(permissions: str) -> str:
    """Describe the owner triplet of a unix permission string like ``-rw-r--r--``."""
    if not permissions or len(permissions) < 4:
        return permissions
    owner = permissions[1:4]
    if owner in _OWNER_LABELS:
        return _OWNER_LABELS[owner]
    if "r" in owner and "w" in owner:
        return "Read & Write"
    return permissions
