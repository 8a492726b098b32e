"""Palette aliases and gradient references.

A palette is not a stored type of its own: it is a user gradient whose id
carries the ``palette:`` prefix. Effect configs may reference one as
``{"gradient": "palette:<name>"}``; the alias is replaced by its literal
before the config reaches the controller.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from ledwarden.core.api.ledfx.models import ColorCatalog
from ledwarden.core.colors.syntax import describe_failure, validate_gradient

logger = logging.getLogger(__name__)

PALETTE_PREFIX = "palette:"
PALETTE_DIRECTION = "90deg"


class Palette(BaseModel):
    id: str
    name: str
    gradient: str


class ResolvedConfig(BaseModel):
    """Effect config with gradient references resolved, plus any errors."""

    config: dict[str, Any]
    errors: list[str]


def palette_id(name: str) -> str:
    return f"{PALETTE_PREFIX}{name}"


def is_palette_alias(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(PALETTE_PREFIX)


def _format_pct(value: float) -> str:
    return f"{round(value, 2):g}"


def build_palette_gradient(colors: list[str]) -> str:
    """Synthesize an evenly spaced linear gradient from literal colors.

    ``["#112233", "#445566", "#778899"]`` becomes
    ``linear-gradient(90deg, #112233 0%, #445566 50%, #778899 100%)``.
    A single color becomes a flat two-stop gradient.

    Raises:
        ValueError: If ``colors`` is empty
    """
    if not colors:
        raise ValueError("at least one color is required")
    if len(colors) == 1:
        colors = [colors[0], colors[0]]

    last = len(colors) - 1
    stops = [f"{color} {_format_pct(i * 100 / last)}%" for i, color in enumerate(colors)]
    return f"linear-gradient({PALETTE_DIRECTION}, {', '.join(stops)})"


def resolve_palette_gradient(alias: str, catalog: ColorCatalog) -> str | None:
    """Look up a gradient id, user gradients first, then built-in ones."""
    user = catalog.gradients.user
    if alias in user:
        return user[alias]
    return catalog.gradients.builtin.get(alias)


def is_known_gradient(gradient_id: str, catalog: ColorCatalog) -> bool:
    return gradient_id in catalog.gradients.user or gradient_id in catalog.gradients.builtin


def resolve_gradient_reference(config: dict[str, Any], catalog: ColorCatalog) -> ResolvedConfig:
    """Resolve and check the ``gradient`` field of an effect config.

    - ``palette:<name>`` is replaced by its literal (missing alias is an error)
    - an id known to the color store is accepted as is
    - anything else must be a syntactically valid gradient literal

    The input config is never modified.
    """
    resolved = dict(config)
    gradient = resolved.get("gradient")
    if gradient is None:
        return ResolvedConfig(config=resolved, errors=[])
    if not isinstance(gradient, str):
        return ResolvedConfig(config=resolved, errors=["gradient must be a string."])

    if is_palette_alias(gradient):
        literal = resolve_palette_gradient(gradient, catalog)
        if literal is None:
            return ResolvedConfig(
                config=resolved, errors=[f"Unknown gradient palette '{gradient}'."]
            )
        logger.debug(f"Resolved {gradient} to {literal}")
        resolved["gradient"] = literal
        gradient = literal
    elif is_known_gradient(gradient, catalog):
        return ResolvedConfig(config=resolved, errors=[])

    check = validate_gradient(gradient)
    if not check.valid:
        return ResolvedConfig(
            config=resolved, errors=[describe_failure("gradient", gradient, check)]
        )
    return ResolvedConfig(config=resolved, errors=[])


def list_palettes(catalog: ColorCatalog) -> list[Palette]:
    """All palettes stored as user gradients, sorted by name."""
    palettes = [
        Palette(id=gid, name=gid[len(PALETTE_PREFIX) :], gradient=value)
        for gid, value in catalog.gradients.user.items()
        if gid.startswith(PALETTE_PREFIX)
    ]
    return sorted(palettes, key=lambda p: p.name)


def list_user_gradient_ids(catalog: ColorCatalog, *, prefix: str | None = None) -> list[str]:
    """User gradient ids, optionally restricted to those starting with ``prefix``."""
    ids = list(catalog.gradients.user)
    if prefix is not None:
        ids = [gid for gid in ids if gid.startswith(prefix)]
    return ids
