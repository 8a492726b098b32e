"""Color store writes: colors, gradients and palettes."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel

from ledwarden.core.api.ledfx.client import LedFxClient
from ledwarden.core.colors.palettes import (
    Palette,
    build_palette_gradient,
    list_palettes,
    list_user_gradient_ids,
    palette_id,
)
from ledwarden.core.colors.syntax import ColorKind, ensure_valid, validate_color
from ledwarden.core.errors import (
    ReferenceValidationError,
    SyntaxValidationError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)


class ColorEntry(BaseModel):
    """One stored color or gradient and where it lives."""

    id: str
    type: ColorKind
    scope: Literal["builtin", "user"]
    value: str


class ColorMutator:
    def __init__(self, client: LedFxClient):
        self.client = client

    async def upsert(self, color_id: str, value: str, kind: ColorKind) -> ColorEntry:
        """Create or replace a user color or gradient after a syntax check.

        Raises:
            SyntaxValidationError: If ``value`` is not a valid literal of ``kind``
        """
        if not color_id:
            raise ValidationFailedError("A color id is required.")
        ensure_valid(kind, value)
        await self.client.upsert_colors({color_id: value})
        logger.info(f"Upserted {kind} '{color_id}'")
        return ColorEntry(id=color_id, type=kind, scope="user", value=value)

    async def get(self, color_id: str) -> ColorEntry:
        """Look up a color, then a gradient; user entries shadow built-in ones."""
        catalog = await self.client.get_colors()
        for kind, scope in (("color", catalog.colors), ("gradient", catalog.gradients)):
            if color_id in scope.user:
                return ColorEntry(id=color_id, type=kind, scope="user", value=scope.user[color_id])
            if color_id in scope.builtin:
                return ColorEntry(
                    id=color_id, type=kind, scope="builtin", value=scope.builtin[color_id]
                )
        raise ReferenceValidationError(f"Color or gradient '{color_id}' not found.")

    async def delete(self, color_id: str) -> None:
        await self.client.delete_color(color_id)

    async def create_palette(self, name: str, colors: list[str]) -> Palette:
        """Store an evenly spaced gradient built from ``colors`` as a palette.

        Every color is checked first; the synthesized gradient is checked
        again before it is written.

        Raises:
            ValidationFailedError: If the name or color list is empty
            SyntaxValidationError: If any color (or the result) is malformed
        """
        if not name or not name.strip():
            raise ValidationFailedError("Palette name must not be empty.")
        if not colors:
            raise ValidationFailedError("A palette needs at least one color.")

        errors = []
        for color in colors:
            check = validate_color(color)
            if not check.valid:
                errors.append(f"Invalid palette color '{color}': {check.reason}")
        if errors:
            raise SyntaxValidationError("; ".join(errors), violations=errors)

        gradient = ensure_valid("gradient", build_palette_gradient(colors))
        pid = palette_id(name)
        await self.client.upsert_colors({pid: gradient})
        logger.info(f"Created palette '{pid}' from {len(colors)} color(s)")
        return Palette(id=pid, name=name, gradient=gradient)

    async def get_palette(self, name: str) -> Palette:
        catalog = await self.client.get_colors()
        pid = palette_id(name)
        gradient = catalog.gradients.user.get(pid)
        if gradient is None:
            raise ReferenceValidationError(f"Palette '{name}' not found.")
        return Palette(id=pid, name=name, gradient=gradient)

    async def delete_palette(self, name: str) -> None:
        await self.client.delete_color(palette_id(name))

    async def list_palettes(self) -> list[Palette]:
        return list_palettes(await self.client.get_colors())

    async def delete_user_gradients(self, prefix: str | None = None) -> int:
        """Delete user gradients one by one.

        Args:
            prefix: Only delete ids starting with this prefix

        Returns:
            Number of gradients deleted
        """
        ids = list_user_gradient_ids(await self.client.get_colors(), prefix=prefix)
        for gradient_id in ids:
            await self.client.delete_color(gradient_id)
        logger.info(f"Deleted {len(ids)} user gradient(s)")
        return len(ids)
