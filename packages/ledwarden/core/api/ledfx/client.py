"""Typed LedFx controller client.

Thin layer over AsyncApiClient: every method maps to one controller
endpoint (two for ``update_playlist``, which reads before it writes) and
parses the controller's response shape into pydantic models. No validation
of cross-entity references happens here.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ledwarden.core.api.http.client import AsyncApiClient
from ledwarden.core.api.http.errors import ControllerDecodeError
from ledwarden.core.api.http.utils import path_segment
from ledwarden.core.api.ledfx.models import (
    ColorCatalog,
    Device,
    Playlist,
    PlaylistState,
    PlaylistUpdate,
    PresetCatalog,
    PresetCategory,
    Scene,
    SceneUpdate,
    SceneVirtual,
    Virtual,
)
from ledwarden.core.errors import ReferenceValidationError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _unwrap(data: Any) -> dict[str, Any]:
    """Strip the controller's optional ``{"status", "data": {...}}`` envelope."""
    if not isinstance(data, dict):
        return {}
    inner = data.get("data")
    if isinstance(inner, dict):
        return inner
    return data


def _keyed(entries: Any) -> list[dict[str, Any]]:
    """Turn an id-keyed map into a list of dicts whose ``id`` is the map key.

    The map key wins over any ``id`` field inside the value.
    """
    if not isinstance(entries, dict):
        return []
    return [{**(value or {}), "id": key} for key, value in entries.items()]


class LedFxClient:
    """LedFx HTTP API client (async).

    Args:
        http_client: Framework AsyncApiClient pointed at the LedFx API root

    Example:
        >>> async with AsyncApiClient(HttpClientConfig(base_url=url)) as http:
        ...     client = LedFxClient(http)
        ...     virtuals = await client.get_virtuals()
    """

    def __init__(self, http_client: AsyncApiClient):
        self.http = http_client

    def _parse(self, model: type[M], data: Any, endpoint: str) -> M:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ControllerDecodeError(
                message=f"Unexpected {model.__name__} payload from LedFx",
                method="GET",
                endpoint=endpoint,
                url=endpoint,
                response_body=str(data)[:512],
                cause=e,
            ) from e

    # ------------------------------------------------------------------
    # Server / devices
    # ------------------------------------------------------------------

    async def get_info(self) -> dict[str, Any]:
        return await self.http.get("/info") or {}

    async def get_devices(self) -> list[Device]:
        data = await self.http.get("/devices")
        return [self._parse(Device, d, "/devices") for d in _keyed(_unwrap(data).get("devices"))]

    async def get_device(self, device_id: str) -> dict[str, Any]:
        return await self.http.get(f"/devices/{path_segment(device_id)}") or {}

    # ------------------------------------------------------------------
    # Virtuals and effects
    # ------------------------------------------------------------------

    async def get_virtuals(self) -> list[Virtual]:
        data = await self.http.get("/virtuals")
        entries = _keyed(_unwrap(data).get("virtuals"))
        return [self._parse(Virtual, v, "/virtuals") for v in entries]

    async def get_virtual(self, virtual_id: str) -> Virtual:
        endpoint = f"/virtuals/{path_segment(virtual_id)}"
        data = _unwrap(await self.http.get(endpoint))
        # Newer controllers nest under "virtual", older ones under the id itself
        body = data.get("virtual") or data.get(virtual_id) or data
        return self._parse(Virtual, {**body, "id": virtual_id}, endpoint)

    async def set_virtual_active(self, virtual_id: str, active: bool) -> None:
        await self.http.put(f"/virtuals/{path_segment(virtual_id)}", json_body={"active": active})

    async def set_virtual_effect(
        self, virtual_id: str, effect_type: str, config: dict[str, Any] | None = None
    ) -> None:
        await self.http.post(
            f"/virtuals/{path_segment(virtual_id)}/effects",
            json_body={"type": effect_type, "config": config or {}},
        )

    async def update_virtual_effect(self, virtual_id: str, config: dict[str, Any]) -> None:
        await self.http.put(
            f"/virtuals/{path_segment(virtual_id)}/effects", json_body={"config": config}
        )

    async def clear_virtual_effect(self, virtual_id: str) -> None:
        await self.http.delete(f"/virtuals/{path_segment(virtual_id)}/effects")

    async def update_virtual_config(
        self,
        virtual_id: str,
        config: dict[str, Any],
        *,
        active: bool | None = None,
    ) -> Virtual:
        """Update a virtual's own config (not its effect) in place.

        Args:
            virtual_id: Virtual to update
            config: Config keys to change
            active: Active flag to keep; omitted from the request when None
        """
        body: dict[str, Any] = {"id": virtual_id}
        if active is not None:
            body["active"] = active
        body["config"] = config
        data = _unwrap(await self.http.post("/virtuals", json_body=body))
        updated = data.get("virtual") or {"id": virtual_id, "config": config}
        return self._parse(Virtual, {**updated, "id": virtual_id}, "/virtuals")

    async def get_effect_schemas(self) -> dict[str, Any]:
        return await self.http.get("/schema/effects") or {}

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    async def get_effect_presets(self, effect_type: str) -> PresetCatalog:
        endpoint = f"/effects/{path_segment(effect_type)}/presets"
        data = _unwrap(await self.http.get(endpoint))
        return self._parse(PresetCatalog, {"effect": effect_type, **data}, endpoint)

    async def get_virtual_presets(self, virtual_id: str) -> PresetCatalog:
        endpoint = f"/virtuals/{path_segment(virtual_id)}/presets"
        return self._parse(PresetCatalog, _unwrap(await self.http.get(endpoint)), endpoint)

    async def apply_preset(
        self, virtual_id: str, category: PresetCategory, effect_id: str, preset_id: str
    ) -> None:
        await self.http.put(
            f"/virtuals/{path_segment(virtual_id)}/presets",
            json_body={"category": category, "effect_id": effect_id, "preset_id": preset_id},
        )

    async def save_preset(self, virtual_id: str, name: str) -> None:
        await self.http.post(
            f"/virtuals/{path_segment(virtual_id)}/presets", json_body={"name": name}
        )

    async def delete_preset(
        self, effect_id: str, category: PresetCategory, preset_id: str
    ) -> None:
        await self.http.delete(
            f"/effects/{path_segment(effect_id)}/presets",
            json_body={"category": category, "preset_id": preset_id},
        )

    # ------------------------------------------------------------------
    # Scenes
    # ------------------------------------------------------------------

    async def get_scenes(self) -> list[Scene]:
        data = await self.http.get("/scenes")
        entries = _keyed(_unwrap(data).get("scenes"))
        return [self._parse(Scene, s, "/scenes") for s in entries]

    async def get_scene(self, scene_id: str) -> Scene:
        endpoint = f"/scenes/{path_segment(scene_id)}"
        data = _unwrap(await self.http.get(endpoint))
        scene = data.get("scene", data)
        # The single-scene endpoint nests name/tags/virtuals under "config"
        body = {**scene.get("config", {}), **{k: v for k, v in scene.items() if k != "config"}}
        return self._parse(Scene, {**body, "id": scene_id}, endpoint)

    async def create_scene(
        self,
        name: str,
        scene_tags: str | None = None,
        virtuals: dict[str, SceneVirtual] | None = None,
    ) -> None:
        body: dict[str, Any] = {"name": name, "scene_tags": scene_tags}
        if virtuals is not None:
            body["virtuals"] = {
                vid: v.model_dump(exclude_none=True) for vid, v in virtuals.items()
            }
        await self.http.post("/scenes", json_body=body)

    async def update_scene(self, update: SceneUpdate) -> None:
        """Overwrite an existing scene in place (same id, no delete)."""
        body = update.model_dump(exclude_none=True)
        await self.http.post("/scenes", json_body=body)

    async def delete_scene(self, scene_id: str) -> None:
        await self.http.delete("/scenes", json_body={"id": scene_id})

    async def activate_scene(self, scene_id: str) -> None:
        await self.http.put("/scenes", json_body={"id": scene_id, "action": "activate"})

    # ------------------------------------------------------------------
    # Playlists
    # ------------------------------------------------------------------

    async def get_playlists(self) -> list[Playlist]:
        data = await self.http.get("/playlists")
        entries = _keyed(_unwrap(data).get("playlists"))
        return [self._parse(Playlist, p, "/playlists") for p in entries]

    async def get_playlist(self, playlist_id: str) -> Playlist | None:
        """Return the playlist, or None when the controller has no such id."""
        for playlist in await self.get_playlists():
            if playlist.id == playlist_id:
                return playlist
        return None

    async def create_playlist(self, playlist: Playlist) -> Playlist:
        body = playlist.model_dump(exclude_none=True)
        data = _unwrap(await self.http.post("/playlists", json_body=body))
        created = data.get("playlist")
        return self._parse(Playlist, created, "/playlists") if created else playlist

    async def update_playlist(
        self,
        playlist_id: str,
        update: PlaylistUpdate,
        *,
        current: Playlist | None = None,
    ) -> Playlist:
        """Upsert supplied fields over the current playlist.

        The controller's POST replaces the whole playlist, so the current
        value is read first (unless the caller just read it) and every field
        not in ``update`` is sent back unchanged.
        """
        if current is None:
            current = await self.get_playlist(playlist_id)
        if current is None:
            raise ReferenceValidationError(f"Playlist '{playlist_id}' not found")

        merged = current.model_dump(exclude_none=True)
        merged.update(update.model_dump(exclude_none=True))
        merged["id"] = playlist_id
        data = _unwrap(await self.http.post("/playlists", json_body=merged))
        updated = data.get("playlist") or merged
        return self._parse(Playlist, updated, "/playlists")

    async def delete_playlist(self, playlist_id: str) -> None:
        await self.http.delete(f"/playlists/{path_segment(playlist_id)}")

    async def start_playlist(self, playlist_id: str) -> None:
        await self.http.put("/playlists", json_body={"action": "start", "id": playlist_id})

    async def stop_playlist(self) -> None:
        await self.http.put("/playlists", json_body={"action": "stop"})

    async def get_playlist_status(self) -> PlaylistState:
        data = _unwrap(await self.http.put("/playlists", json_body={"action": "state"}))
        return self._parse(PlaylistState, data.get("state") or {}, "/playlists")

    # ------------------------------------------------------------------
    # Color store
    # ------------------------------------------------------------------

    async def get_colors(self) -> ColorCatalog:
        data = await self.http.get("/colors")
        return self._parse(ColorCatalog, _unwrap(data), "/colors")

    async def upsert_colors(self, values: dict[str, str]) -> None:
        await self.http.post("/colors", json_body=values)

    async def delete_color(self, color_id: str) -> None:
        await self.http.delete(f"/colors/{path_segment(color_id)}")
