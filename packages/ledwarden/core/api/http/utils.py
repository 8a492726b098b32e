"""Utility functions for controller HTTP operations."""

from __future__ import annotations

from urllib.parse import quote


def join_url(base_url: str, endpoint: str) -> str:
    """Join the API root with an endpoint path.

    Args:
        base_url: API root (e.g. "http://localhost:8888/api")
        endpoint: Endpoint path (e.g. "/virtuals" or "virtuals")

    Returns:
        Joined URL (e.g. "http://localhost:8888/api/virtuals")
    """
    return f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"


def path_segment(value: str) -> str:
    """Quote an entity id for use as a single path segment.

    Controller ids may contain ':' (palettes) or spaces.
    """
    return quote(value, safe="")


def safe_snippet(content: bytes, limit: int) -> str:
    """Extract a safe text snippet from response content for error messages.

    Args:
        content: Response body bytes
        limit: Maximum number of bytes to include

    Returns:
        Truncated, decoded text snippet
    """
    if not content:
        return ""
    return content[:limit].decode("utf-8", errors="replace")
