"""Cross-entity reference checks run before any controller write.

Every check reads fresh controller state, compares the proposed mutation
against it and returns a list of violations. An empty list means the write
may proceed. Nothing here mutates the controller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from ledwarden.core.api.ledfx.client import LedFxClient
from ledwarden.core.api.ledfx.models import (
    PRESET_CATEGORIES,
    ColorCatalog,
    PresetCatalog,
    SceneVirtual,
)
from ledwarden.core.colors.palettes import resolve_gradient_reference
from ledwarden.core.errors import ReferenceValidationError

logger = logging.getLogger(__name__)

# Scene entries may carry this instead of a real preset id
RESET_PRESET = "reset"

ViolationKind = Literal["virtual", "effect_type", "preset", "scene", "gradient"]


class ReferenceViolation(BaseModel):
    """One reference the controller cannot satisfy."""

    model_config = ConfigDict(frozen=True)

    kind: ViolationKind
    ref: str
    message: str


def raise_for_violations(violations: list[ReferenceViolation]) -> None:
    """Raise ReferenceValidationError if any violation was found.

    Raises:
        ReferenceValidationError: With every violation message attached
    """
    if not violations:
        return
    messages = [v.message for v in violations]
    raise ReferenceValidationError("; ".join(messages), violations=messages)


def effect_types_from_schemas(schemas: Mapping[str, Any]) -> set[str]:
    """Known effect types: the keys of the effect-schema catalog."""
    inner = schemas.get("effects") if isinstance(schemas.get("effects"), dict) else schemas
    return set(inner)


class ReferenceValidator:
    """Checks proposed mutations against the controller's current state.

    Args:
        client: Controller client used for every read
    """

    def __init__(self, client: LedFxClient):
        self.client = client

    async def _virtual_ids(self) -> set[str]:
        return {v.id for v in await self.client.get_virtuals()}

    async def _effect_types(self) -> set[str]:
        return effect_types_from_schemas(await self.client.get_effect_schemas())

    async def validate_scene_virtuals(
        self, virtuals: Mapping[str, SceneVirtual]
    ) -> list[ReferenceViolation]:
        """Check a scene's virtual map.

        Reads the virtual list and the effect-schema catalog once. Preset
        catalogs are read only for effect types that carry a preset
        reference, once per type.
        """
        virtual_ids = await self._virtual_ids()
        effect_types = await self._effect_types()
        presets: dict[str, PresetCatalog] = {}
        violations: list[ReferenceViolation] = []

        for virtual_id, entry in virtuals.items():
            if virtual_id not in virtual_ids:
                violations.append(
                    ReferenceViolation(
                        kind="virtual", ref=virtual_id, message=f"Unknown virtual '{virtual_id}'"
                    )
                )
                continue

            effect_type = entry.type
            if not effect_type:
                continue
            if effect_type not in effect_types:
                violations.append(
                    ReferenceViolation(
                        kind="effect_type",
                        ref=effect_type,
                        message=f"Unknown effect type '{effect_type}' on virtual '{virtual_id}'",
                    )
                )
                continue

            if not entry.preset or entry.preset == RESET_PRESET:
                continue
            if effect_type not in presets:
                presets[effect_type] = await self.client.get_effect_presets(effect_type)
            if not presets[effect_type].contains(entry.preset, entry.preset_category):
                where = entry.preset_category or " or ".join(PRESET_CATEGORIES)
                violations.append(
                    ReferenceViolation(
                        kind="preset",
                        ref=entry.preset,
                        message=(
                            f"Preset '{entry.preset}' not found for effect "
                            f"'{effect_type}' in {where}"
                        ),
                    )
                )

        if violations:
            logger.info(f"Scene virtual map rejected with {len(violations)} violation(s)")
        return violations

    async def validate_playlist_scene_ids(
        self, scene_ids: Iterable[str]
    ) -> list[ReferenceViolation]:
        """Report every absent scene id in a single aggregated violation."""
        known = {s.id for s in await self.client.get_scenes()}
        missing: list[str] = []
        for scene_id in scene_ids:
            if scene_id not in known and scene_id not in missing:
                missing.append(scene_id)
        if not missing:
            return []
        return [
            ReferenceViolation(
                kind="scene",
                ref=",".join(missing),
                message=f"Missing scene IDs: {', '.join(missing)}",
            )
        ]

    async def validate_virtuals_exist(self, virtual_ids: Iterable[str]) -> list[ReferenceViolation]:
        known = await self._virtual_ids()
        return [
            ReferenceViolation(kind="virtual", ref=vid, message=f"Unknown virtual '{vid}'")
            for vid in virtual_ids
            if vid not in known
        ]

    async def validate_effect_types(self, effect_types: Iterable[str]) -> list[ReferenceViolation]:
        known = await self._effect_types()
        return [
            ReferenceViolation(
                kind="effect_type", ref=t, message=f"Unknown effect type '{t}'"
            )
            for t in effect_types
            if t not in known
        ]

    def validate_effect_config(
        self, config: Mapping[str, Any], catalog: ColorCatalog
    ) -> tuple[dict[str, Any], list[ReferenceViolation]]:
        """Resolve the config's gradient reference against ``catalog``.

        Returns:
            The config with any palette alias replaced, and the violations
        """
        resolved = resolve_gradient_reference(dict(config), catalog)
        violations = [
            ReferenceViolation(kind="gradient", ref=str(config.get("gradient")), message=err)
            for err in resolved.errors
        ]
        return resolved.config, violations
