"""Scene capture, in-place update and blender-scene refresh."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, Field

from ledwarden.core.api.ledfx.client import LedFxClient
from ledwarden.core.api.ledfx.models import (
    BLENDER_EFFECT,
    SceneUpdate,
    SceneVirtual,
    Virtual,
)
from ledwarden.core.errors import LedWardenError, ValidationFailedError
from ledwarden.core.validation.references import ReferenceValidator, raise_for_violations

logger = logging.getLogger(__name__)


class SceneRefreshResult(BaseModel):
    name: str
    status: Literal["updated", "failed"]
    error: str | None = None


class SceneRefreshReport(BaseModel):
    """Outcome of a blender-scene refresh batch."""

    updated: int = 0
    failed: int = 0
    results: list[SceneRefreshResult] = Field(default_factory=list)


def blender_activation_ids(virtuals: list[Virtual]) -> list[str]:
    """Ids of blender virtuals and the sources they read from.

    These must be active for a scene capture to record them.
    """
    ids: list[str] = []
    for virtual in virtuals:
        if (virtual.effect_type or "").lower() != BLENDER_EFFECT or virtual.effect is None:
            continue
        config = virtual.effect.config
        roles = (config.get("background"), config.get("foreground"), config.get("mask"))
        for candidate in (virtual.id, *roles):
            if isinstance(candidate, str) and candidate and candidate not in ids:
                ids.append(candidate)
    return ids


def build_scene_virtuals(
    virtuals: list[Virtual], *, force_active: list[str] | None = None
) -> dict[str, SceneVirtual]:
    """Explicit scene payload from the live virtual list.

    Virtuals without an effect are left out. Active ones (or those listed in
    ``force_active``) are marked ``activate``.
    """
    force = set(force_active or [])
    payload: dict[str, SceneVirtual] = {}
    for virtual in virtuals:
        if virtual.effect is None or not virtual.effect.type:
            continue
        payload[virtual.id] = SceneVirtual(
            type=virtual.effect.type,
            config=dict(virtual.effect.config),
            action="activate" if virtual.active or virtual.id in force else None,
        )
    return payload


def rebuild_scene_virtuals(virtuals: Mapping[str, SceneVirtual]) -> dict[str, SceneVirtual]:
    """Normalize a stored scene map for writing back.

    Entries without an effect type become explicit ``ignore`` entries.
    """
    payload: dict[str, SceneVirtual] = {}
    for virtual_id, entry in virtuals.items():
        if not entry.type:
            payload[virtual_id] = SceneVirtual(type="", config={}, action=entry.action or "ignore")
            continue
        payload[virtual_id] = entry.model_copy(update={"config": dict(entry.config)})
    return payload


class SceneMutator:
    """Validated scene writes.

    Args:
        client: Controller client
        validator: Reference validator (built from ``client`` when omitted)
    """

    def __init__(self, client: LedFxClient, validator: ReferenceValidator | None = None):
        self.client = client
        self.validator = validator or ReferenceValidator(client)

    async def snapshot_current(self) -> tuple[dict[str, SceneVirtual], list[str]]:
        """Capture every virtual with an effect.

        Returns:
            The scene virtual map and the blender-related ids that still need
            activating before the capture is written
        """
        virtuals = await self.client.get_virtuals()
        activation_ids = blender_activation_ids(virtuals)
        return build_scene_virtuals(virtuals, force_active=activation_ids), activation_ids

    async def _activate(self, virtual_ids: list[str]) -> None:
        for virtual_id in virtual_ids:
            await self.client.set_virtual_active(virtual_id, True)

    async def create_scene(
        self, name: str, scene_tags: str | None = None
    ) -> dict[str, SceneVirtual]:
        """Create a scene from the current state of all virtuals.

        Raises:
            ValidationFailedError: If the name is empty
            ReferenceValidationError: If the captured map fails validation
        """
        if not name or not name.strip():
            raise ValidationFailedError("Scene name must not be empty.")

        scene_virtuals, activation_ids = await self.snapshot_current()
        raise_for_violations(await self.validator.validate_scene_virtuals(scene_virtuals))

        await self._activate(activation_ids)
        await self.client.create_scene(name, scene_tags, scene_virtuals)
        logger.info(f"Created scene '{name}' with {len(scene_virtuals)} virtual(s)")
        return scene_virtuals

    async def update_scene(
        self,
        scene_id: str,
        *,
        name: str | None = None,
        scene_tags: str | None = None,
        virtuals: Mapping[str, SceneVirtual] | None = None,
        snapshot_current: bool = False,
    ) -> SceneUpdate:
        """Update a scene in place, preserving every field not supplied.

        Args:
            scene_id: Scene to update
            name: New name
            scene_tags: New tags
            virtuals: Replacement virtual map
            snapshot_current: Replace the virtual map with a capture of the
                current virtual state

        Returns:
            The payload that was written

        Raises:
            ValidationFailedError: If nothing (or both map sources) was supplied
            ReferenceValidationError: If the new virtual map fails validation
        """
        if virtuals is not None and snapshot_current:
            raise ValidationFailedError("Pass either virtuals or snapshot_current, not both.")
        if name is None and scene_tags is None and virtuals is None and not snapshot_current:
            raise ValidationFailedError(f"Nothing to update for scene '{scene_id}'.")

        current = await self.client.get_scene(scene_id)

        activation_ids: list[str] = []
        new_virtuals: dict[str, SceneVirtual] | None = None
        if snapshot_current:
            new_virtuals, activation_ids = await self.snapshot_current()
        elif virtuals is not None:
            new_virtuals = dict(virtuals)

        if new_virtuals is not None:
            raise_for_violations(await self.validator.validate_scene_virtuals(new_virtuals))

        update = SceneUpdate(
            id=scene_id,
            name=name if name is not None else current.name,
            scene_tags=scene_tags if scene_tags is not None else current.scene_tags,
            virtuals=new_virtuals if new_virtuals is not None else dict(current.virtuals or {}),
            **(current.model_extra or {}),
        )

        await self._activate(activation_ids)
        await self.client.update_scene(update)
        logger.info(f"Updated scene '{scene_id}' in place")
        return update

    async def refresh_blender_scenes(self) -> SceneRefreshReport:
        """Rewrite every scene that contains a blender entry.

        Each scene is validated and updated in place on its own; a failure is
        recorded and the batch moves on.
        """
        scenes = await self.client.get_scenes()
        report = SceneRefreshReport()

        for scene in scenes:
            if not scene.has_blender():
                continue
            label = scene.name or scene.id
            try:
                await self.update_scene(
                    scene.id, virtuals=rebuild_scene_virtuals(scene.virtuals or {})
                )
            except LedWardenError as e:
                logger.warning(f"Refresh of blender scene '{label}' failed: {e}")
                report.failed += 1
                report.results.append(
                    SceneRefreshResult(name=label, status="failed", error=str(e))
                )
                continue
            report.updated += 1
            report.results.append(SceneRefreshResult(name=label, status="updated"))

        return report
