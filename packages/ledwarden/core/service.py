"""Caller-facing facade over the validated operations.

One ``LedWardenService`` holds one controller connection and exposes one
method per mutation type. ``run`` turns any of them into a result envelope:

    >>> async with LedWardenService.from_config(load_app_config()) as svc:
    ...     result = await svc.run("create_scene", svc.create_scene("Intro"))
    ...     result["ok"]
    True
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Sequence
from typing import Any

import httpx

from ledwarden.core.api.ledfx.client import LedFxClient
from ledwarden.core.api.ledfx.models import (
    Playlist,
    PlaylistMode,
    PresetCategory,
    SceneUpdate,
    SceneVirtual,
)
from ledwarden.core.blender.orchestrator import BlenderOrchestrator, BlenderResult, BlenderSource
from ledwarden.core.colors.palettes import Palette
from ledwarden.core.colors.syntax import ColorKind
from ledwarden.core.config.loader import create_ledfx_client, create_polling_policy
from ledwarden.core.config.models import AppConfig
from ledwarden.core.envelope import error_envelope, success_envelope
from ledwarden.core.errors import LedWardenError
from ledwarden.core.mutations.colors import ColorEntry, ColorMutator
from ledwarden.core.mutations.effects import EffectMutator, TransitionConfig
from ledwarden.core.mutations.playlists import PatchOperation, PlaylistMutator
from ledwarden.core.mutations.scenes import SceneMutator, SceneRefreshReport
from ledwarden.core.polling import PollingPolicy
from ledwarden.core.utils.logging import log_operation
from ledwarden.core.validation.references import ReferenceValidator

logger = logging.getLogger(__name__)


class LedWardenService:
    """Validated operations against one LedFx controller.

    Args:
        client: Controller client shared by every operation
        polling: Budget for effect-application polling
    """

    def __init__(self, client: LedFxClient, *, polling: PollingPolicy | None = None):
        self.client = client
        self.validator = ReferenceValidator(client)
        self.polling = polling or PollingPolicy()
        self.effects = EffectMutator(client, self.validator, self.polling)
        self.blender = BlenderOrchestrator(client, self.validator, self.polling)
        self.scenes = SceneMutator(client, self.validator)
        self.playlists = PlaylistMutator(client, self.validator)
        self.colors = ColorMutator(client)

    @classmethod
    def from_config(
        cls, config: AppConfig, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> LedWardenService:
        return cls(
            create_ledfx_client(config, transport=transport),
            polling=create_polling_policy(config),
        )

    async def aclose(self) -> None:
        await self.client.http.aclose()

    async def __aenter__(self) -> LedWardenService:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def run(self, operation: str, call: Awaitable[Any], **fields: Any) -> dict[str, Any]:
        """Await ``call`` and wrap its outcome in an envelope.

        Every ledwarden failure becomes an error envelope; any other
        exception is a bug and propagates.

        Args:
            operation: Name recorded in the operation log
            call: Awaitable returned by one of this service's methods
            **fields: Extra values for the operation log
        """
        try:
            with log_operation(operation, **fields):
                result = await call
        except LedWardenError as e:
            return error_envelope(e)
        return success_envelope(result)

    # Effects

    async def set_effect(
        self, virtual_id: str, effect_type: str, effect_config: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        return await self.effects.set_effect(virtual_id, effect_type, effect_config)

    async def update_effect(self, virtual_id: str, config: dict[str, Any]) -> dict[str, Any]:
        return await self.effects.update_effect(virtual_id, config)

    async def clear_effect(self, virtual_id: str) -> None:
        await self.effects.clear_effect(virtual_id)

    async def set_virtual_active(self, virtual_id: str, active: bool) -> None:
        await self.effects.set_virtual_active(virtual_id, active)

    async def update_transition(
        self,
        virtual_id: str,
        *,
        transition_mode: str | None = None,
        transition_time: float | None = None,
    ) -> TransitionConfig:
        return await self.effects.update_transition(
            virtual_id, transition_mode=transition_mode, transition_time=transition_time
        )

    async def apply_preset(
        self, virtual_id: str, category: PresetCategory, effect_id: str, preset_id: str
    ) -> None:
        await self.effects.apply_preset(virtual_id, category, effect_id, preset_id)

    async def set_blender(
        self,
        blender_virtual_id: str,
        background: BlenderSource,
        foreground: BlenderSource,
        mask: BlenderSource,
        blender_config: dict[str, Any] | None = None,
    ) -> BlenderResult:
        return await self.blender.set_blender(
            blender_virtual_id, background, foreground, mask, blender_config
        )

    # Scenes

    async def create_scene(
        self, name: str, scene_tags: str | None = None
    ) -> dict[str, SceneVirtual]:
        return await self.scenes.create_scene(name, scene_tags)

    async def update_scene(
        self,
        scene_id: str,
        *,
        name: str | None = None,
        scene_tags: str | None = None,
        virtuals: dict[str, SceneVirtual] | None = None,
        snapshot_current: bool = False,
    ) -> SceneUpdate:
        return await self.scenes.update_scene(
            scene_id,
            name=name,
            scene_tags=scene_tags,
            virtuals=virtuals,
            snapshot_current=snapshot_current,
        )

    async def refresh_blender_scenes(self) -> SceneRefreshReport:
        return await self.scenes.refresh_blender_scenes()

    async def activate_scene(self, scene_id: str) -> None:
        await self.client.activate_scene(scene_id)

    async def delete_scene(self, scene_id: str) -> None:
        await self.client.delete_scene(scene_id)

    # Playlists

    async def create_playlist(
        self,
        playlist_id: str,
        name: str,
        scene_ids: Sequence[str],
        *,
        duration_ms: int | None = None,
        mode: PlaylistMode = "sequence",
    ) -> Playlist:
        return await self.playlists.create_playlist(
            playlist_id, name, scene_ids, duration_ms=duration_ms, mode=mode
        )

    async def update_playlist(
        self,
        playlist_id: str,
        *,
        name: str | None = None,
        scene_ids: Sequence[str] | None = None,
        duration_ms: int | None = None,
        mode: PlaylistMode | None = None,
    ) -> Playlist:
        return await self.playlists.update_playlist(
            playlist_id, name=name, scene_ids=scene_ids, duration_ms=duration_ms, mode=mode
        )

    async def upsert_playlist(
        self,
        playlist_id: str,
        *,
        name: str | None = None,
        scene_ids: Sequence[str] | None = None,
        duration_ms: int | None = None,
        mode: PlaylistMode | None = None,
    ) -> Playlist:
        return await self.playlists.upsert_playlist(
            playlist_id, name=name, scene_ids=scene_ids, duration_ms=duration_ms, mode=mode
        )

    async def patch_playlist_items(
        self,
        playlist_id: str,
        operation: PatchOperation,
        *,
        index: int | None = None,
        to_index: int | None = None,
        scene_id: str | None = None,
        duration_ms: int | None = None,
    ) -> Playlist:
        return await self.playlists.patch_items(
            playlist_id,
            operation,
            index=index,
            to_index=to_index,
            scene_id=scene_id,
            duration_ms=duration_ms,
        )

    async def add_scene_to_playlist(
        self, playlist_id: str, scene_id: str, duration_ms: int | None = None
    ) -> Playlist:
        return await self.playlists.add_scene(playlist_id, scene_id, duration_ms)

    async def delete_playlist(self, playlist_id: str) -> None:
        await self.client.delete_playlist(playlist_id)

    # Colors and palettes

    async def upsert_color(self, color_id: str, value: str, kind: ColorKind) -> ColorEntry:
        return await self.colors.upsert(color_id, value, kind)

    async def get_color(self, color_id: str) -> ColorEntry:
        return await self.colors.get(color_id)

    async def delete_color(self, color_id: str) -> None:
        await self.colors.delete(color_id)

    async def create_palette(self, name: str, colors: list[str]) -> Palette:
        return await self.colors.create_palette(name, colors)

    async def get_palette(self, name: str) -> Palette:
        return await self.colors.get_palette(name)

    async def delete_palette(self, name: str) -> None:
        await self.colors.delete_palette(name)

    async def list_palettes(self) -> list[Palette]:
        return await self.colors.list_palettes()

    async def delete_user_gradients(self, prefix: str | None = None) -> int:
        return await self.colors.delete_user_gradients(prefix)
