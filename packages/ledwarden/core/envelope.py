"""Result payloads handed back to the tool-calling dispatcher."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from ledwarden.core.errors import LedWardenError


def to_jsonable(value: Any) -> Any:
    """Dump pydantic models (also inside lists and dicts) to plain JSON data."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    if isinstance(value, list | tuple):
        return [to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    return value


def success_envelope(data: Any = None) -> dict[str, Any]:
    """``{"ok": true, "data": ...}``; ``data`` is omitted when None."""
    out: dict[str, Any] = {"ok": True}
    if data is not None:
        out["data"] = to_jsonable(data)
    return out


def error_envelope(error: LedWardenError) -> dict[str, Any]:
    """``{"ok": false, "error": {"code", "kind", "message", ...}}``.

    Controller errors add ``method``, ``endpoint``, ``url`` and
    ``duration_ms``; rejections add ``status``, ``status_text`` and
    ``response_body``; transport failures add ``cause``.
    """
    return {"ok": False, "error": error.to_dict()}
