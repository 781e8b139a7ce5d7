"""Parsing of permission lists typed at the shell."""

from collections.abc import Sequence

from .store import DEFAULT_PERMISSIONS


def parse_permissions(
    raw: str, default: Sequence[str] = DEFAULT_PERMISSIONS
) -> list[str]:
    """Turn comma-separated text into an ordered permission list.

    Tokens are stripped of surrounding whitespace and empty tokens are
    dropped. Order and duplicates are kept. When nothing is left, a fresh
    copy of ``default`` is returned.

    Args:
        raw: Text such as ``"view, edit"``.
        default: Permissions to use when ``raw`` holds no tokens.

    Returns:
        List of permission tags.
    """
    tokens = [token.strip() for token in raw.split(",")]
    permissions = [token for token in tokens if token]
    return permissions or list(default)


def format_permissions(permissions: Sequence[str]) -> str:
    """Render a permission list the way it is typed."""
    return ", ".join(permissions)
