"""Blender composition: three source virtuals feeding one composite.

The blender effect reads live output from a background, a foreground and a
mask virtual. Each source must be running its effect before the composite is
written, otherwise LedFx renders a blank layer. Sources are written and
confirmed one at a time, in role order, and the composite is only written
once all three are confirmed.

Source writes that already succeeded are not rolled back when a later step
fails.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, Field

from ledwarden.core.api.ledfx.client import LedFxClient
from ledwarden.core.api.ledfx.models import BLENDER_EFFECT
from ledwarden.core.errors import ValidationFailedError
from ledwarden.core.polling import PollingPolicy, ensure_effect_applied
from ledwarden.core.validation.references import (
    ReferenceValidator,
    ReferenceViolation,
    raise_for_violations,
)

logger = logging.getLogger(__name__)

BlenderRole = Literal["background", "foreground", "mask"]
BLENDER_ROLES: tuple[BlenderRole, ...] = ("background", "foreground", "mask")


class BlenderSource(BaseModel):
    """Effect to run on one source virtual.

    ``effect_config`` is left untyped so a malformed value can be reported
    as a validation failure instead of a parse error.
    """

    virtual_id: str
    effect_type: str
    effect_config: Any = None


class BlenderResult(BaseModel):
    """Virtuals wired into a composite that was confirmed applied."""

    blender_virtual_id: str
    background: str
    foreground: str
    mask: str
    config: dict[str, Any] = Field(default_factory=dict)


class BlenderOrchestrator:
    """Runs the validate, write-sources, write-composite sequence.

    Args:
        client: Controller client
        validator: Reference validator (built from ``client`` when omitted)
        polling: Budget used to confirm each write
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

    def _check_descriptors(
        self, blender_virtual_id: str, sources: dict[BlenderRole, BlenderSource]
    ) -> None:
        for role, source in sources.items():
            if not source.virtual_id or not source.effect_type:
                raise ValidationFailedError(
                    f"Blender {role} must include virtual_id and effect_type."
                )
            if source.effect_type.lower() == BLENDER_EFFECT:
                raise ValidationFailedError(
                    f"Blender {role} '{source.virtual_id}' cannot use the blender effect."
                )
            if source.effect_config is not None and not isinstance(source.effect_config, dict):
                raise ValidationFailedError(
                    f"effect_config must be an object for {role} '{source.virtual_id}'."
                )

        ids = [s.virtual_id for s in sources.values()]
        if len(set(ids)) != len(ids):
            raise ValidationFailedError(
                f"Blender sources must be distinct virtuals, got {', '.join(ids)}."
            )
        if blender_virtual_id in ids:
            raise ValidationFailedError(
                f"Blender virtual '{blender_virtual_id}' cannot be one of its own sources."
            )

    async def _resolve_sources(
        self, blender_virtual_id: str, sources: dict[BlenderRole, BlenderSource]
    ) -> dict[BlenderRole, dict[str, Any]]:
        violations: list[ReferenceViolation] = []
        violations += await self.validator.validate_virtuals_exist(
            [blender_virtual_id, *(s.virtual_id for s in sources.values())]
        )
        violations += await self.validator.validate_effect_types(
            [*(s.effect_type for s in sources.values()), BLENDER_EFFECT]
        )

        catalog = await self.client.get_colors()
        configs: dict[BlenderRole, dict[str, Any]] = {}
        for role, source in sources.items():
            resolved, found = self.validator.validate_effect_config(
                source.effect_config or {}, catalog
            )
            violations += found
            configs[role] = resolved

        raise_for_violations(violations)
        return configs

    async def set_blender(
        self,
        blender_virtual_id: str,
        background: BlenderSource,
        foreground: BlenderSource,
        mask: BlenderSource,
        blender_config: dict[str, Any] | None = None,
    ) -> BlenderResult:
        """Configure three sources, then the composite that reads them.

        Args:
            blender_virtual_id: Virtual that will run the blender effect
            background: Background source
            foreground: Foreground source
            mask: Mask source
            blender_config: Extra blender parameters (``stretch``, ``cutoff``,
                ``invert``, ``brightness``, ...)

        Raises:
            ValidationFailedError: Malformed descriptors; nothing written
            ReferenceValidationError: Unknown virtual, effect type or gradient;
                nothing written
            PreconditionFailedError: A source or the composite was never
                observed applied; the composite is not written after a source
                failure
        """
        if blender_config is not None and not isinstance(blender_config, dict):
            raise ValidationFailedError("blender_config must be an object.")
        sources: dict[BlenderRole, BlenderSource] = {
            "background": background,
            "foreground": foreground,
            "mask": mask,
        }
        self._check_descriptors(blender_virtual_id, sources)
        configs = await self._resolve_sources(blender_virtual_id, sources)

        for role in BLENDER_ROLES:
            source = sources[role]
            await self.client.set_virtual_effect(
                source.virtual_id, source.effect_type, configs[role]
            )
            await self.client.set_virtual_active(source.virtual_id, True)
            await ensure_effect_applied(
                self.client,
                source.virtual_id,
                source.effect_type,
                self.polling,
                step=f"source:{role}",
            )
            logger.debug(f"Blender {role} '{source.virtual_id}' confirmed")

        # Role ids override any caller parameter of the same name
        config = {
            **(blender_config or {}),
            **{role: sources[role].virtual_id for role in BLENDER_ROLES},
        }
        await self.client.set_virtual_effect(blender_virtual_id, BLENDER_EFFECT, config)
        await ensure_effect_applied(
            self.client, blender_virtual_id, BLENDER_EFFECT, self.polling, step="composite"
        )
        logger.info(f"Blender set on '{blender_virtual_id}'")

        return BlenderResult(
            blender_virtual_id=blender_virtual_id,
            background=background.virtual_id,
            foreground=foreground.virtual_id,
            mask=mask.virtual_id,
            config=config,
        )
