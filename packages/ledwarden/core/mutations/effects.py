"""Single-virtual effect writes: set, update, activate, transitions, presets."""

from __future__ import annotations

import logging
import math
from typing import Any

from pydantic import BaseModel

from ledwarden.core.api.ledfx.client import LedFxClient
from ledwarden.core.api.ledfx.models import BLENDER_EFFECT, PRESET_CATEGORIES, PresetCategory
from ledwarden.core.errors import (
    PreconditionFailedError,
    ReferenceValidationError,
    ValidationFailedError,
)
from ledwarden.core.polling import PollingPolicy, ensure_effect_applied
from ledwarden.core.validation.references import ReferenceValidator, raise_for_violations

logger = logging.getLogger(__name__)

TRANSITION_MODES: tuple[str, ...] = (
    "Add",
    "Dissolve",
    "Push",
    "Slide",
    "Iris",
    "Through White",
    "Through Black",
    "None",
)
MAX_TRANSITION_TIME = 5.0


class TransitionConfig(BaseModel):
    """Effective transition settings of a virtual after an update."""

    virtual_id: str
    transition_mode: str | None = None
    transition_time: float | None = None


def ensure_effect_config(value: Any, field: str = "effect_config") -> dict[str, Any]:
    """Treat a missing config as empty; reject anything that is not a mapping."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationFailedError(f"{field} must be an object.")
    return value


class EffectMutator:
    """Validated writes against a single virtual.

    Args:
        client: Controller client
        validator: Reference validator (built from ``client`` when omitted)
        polling: Budget used to confirm effect writes
    """

    def __init__(
        self,
        client: LedFxClient,
        validator: ReferenceValidator | None = None,
        polling: PollingPolicy | None = None,
    ):
        self.client = client
        self.validator = validator or ReferenceValidator(client)
        self.polling = polling or PollingPolicy()

    async def _resolve_config(self, config: dict[str, Any]) -> dict[str, Any]:
        catalog = await self.client.get_colors()
        resolved, violations = self.validator.validate_effect_config(config, catalog)
        raise_for_violations(violations)
        return resolved

    async def set_effect(
        self, virtual_id: str, effect_type: str, config: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Assign an effect and wait until the controller reports it.

        Returns:
            The config that was written, with palette aliases resolved

        Raises:
            ValidationFailedError: Blender requested, or config not a mapping
            ReferenceValidationError: Unknown virtual, effect type or gradient
            PreconditionFailedError: The effect never showed up on the virtual
        """
        if effect_type.lower() == BLENDER_EFFECT:
            raise ValidationFailedError(
                "Blender must be set using set_blender, which validates its sources."
            )
        effect_config = ensure_effect_config(config)

        violations = await self.validator.validate_virtuals_exist([virtual_id])
        violations += await self.validator.validate_effect_types([effect_type])
        raise_for_violations(violations)
        resolved = await self._resolve_config(effect_config)

        await self.client.set_virtual_effect(virtual_id, effect_type, resolved)
        await ensure_effect_applied(
            self.client, virtual_id, effect_type, self.polling, step="set_effect"
        )
        logger.info(f"Effect '{effect_type}' set on '{virtual_id}'")
        return resolved

    async def update_effect(self, virtual_id: str, config: dict[str, Any]) -> dict[str, Any]:
        """Change the current effect's config without replacing the effect."""
        effect_config = ensure_effect_config(config, field="config")
        resolved = await self._resolve_config(effect_config)
        await self.client.update_virtual_effect(virtual_id, resolved)
        return resolved

    async def clear_effect(self, virtual_id: str) -> None:
        await self.client.clear_virtual_effect(virtual_id)

    async def set_virtual_active(self, virtual_id: str, active: bool) -> None:
        """Activate or deactivate a virtual.

        Raises:
            PreconditionFailedError: Activating a virtual that has no effect
        """
        if active:
            virtual = await self.client.get_virtual(virtual_id)
            if not virtual.effect_type:
                raise PreconditionFailedError(
                    f"Virtual '{virtual_id}' has no effect. Set an effect before activation.",
                    step="activate",
                    virtual_id=virtual_id,
                )
        await self.client.set_virtual_active(virtual_id, active)

    async def update_transition(
        self,
        virtual_id: str,
        *,
        transition_mode: str | None = None,
        transition_time: float | None = None,
    ) -> TransitionConfig:
        """Change a virtual's transition settings, keeping its active flag.

        Raises:
            ValidationFailedError: Unknown mode, time outside [0, 5], or nothing
                to change
        """
        changes: dict[str, Any] = {}
        if transition_mode is not None:
            if transition_mode not in TRANSITION_MODES:
                raise ValidationFailedError(
                    f"Invalid transition_mode '{transition_mode}'. "
                    f"Expected one of: {', '.join(TRANSITION_MODES)}."
                )
            changes["transition_mode"] = transition_mode
        if transition_time is not None:
            if (
                isinstance(transition_time, bool)
                or not isinstance(transition_time, (int, float))
                or not math.isfinite(transition_time)
                or not 0 <= transition_time <= MAX_TRANSITION_TIME
            ):
                raise ValidationFailedError(
                    "transition_time must be a finite number between 0 and 5."
                )
            changes["transition_time"] = transition_time
        if not changes:
            raise ValidationFailedError("Provide transition_mode or transition_time.")

        current = await self.client.get_virtual(virtual_id)
        updated = await self.client.update_virtual_config(
            virtual_id, changes, active=current.active
        )
        effective = {**changes, **updated.config}
        return TransitionConfig(
            virtual_id=virtual_id,
            transition_mode=effective.get("transition_mode"),
            transition_time=effective.get("transition_time"),
        )

    async def apply_preset(
        self,
        virtual_id: str,
        category: PresetCategory,
        effect_id: str,
        preset_id: str,
    ) -> None:
        """Apply a stored preset after checking it exists for the effect.

        Raises:
            ValidationFailedError: Unknown category
            ReferenceValidationError: Preset not found in that category
        """
        if category not in PRESET_CATEGORIES:
            raise ValidationFailedError(
                f"Invalid preset category '{category}'. "
                f"Expected one of: {', '.join(PRESET_CATEGORIES)}."
            )
        presets = await self.client.get_effect_presets(effect_id)
        if not presets.contains(preset_id, category):
            raise ReferenceValidationError(
                f"Preset '{preset_id}' not found for effect '{effect_id}' in {category}."
            )
        await self.client.apply_preset(virtual_id, category, effect_id, preset_id)
