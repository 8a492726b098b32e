"""Shared pytest fixtures for ledwarden tests.

The controller double is an ``AsyncMock`` specced on ``LedFxClient`` whose
read methods answer from a small in-memory state. Effect writes update that
state (unless disabled) so effect-application polling can observe them.
"""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from ledwarden.core.api.http.errors import ControllerRejectedError
from ledwarden.core.api.ledfx.client import LedFxClient
from ledwarden.core.api.ledfx.models import (
    ColorCatalog,
    ColorScope,
    Effect,
    Playlist,
    PlaylistUpdate,
    PresetCatalog,
    Scene,
    Virtual,
)
from ledwarden.core.polling import PollingPolicy

WRITE_METHODS = (
    "set_virtual_active",
    "set_virtual_effect",
    "update_virtual_effect",
    "clear_virtual_effect",
    "update_virtual_config",
    "apply_preset",
    "save_preset",
    "delete_preset",
    "create_scene",
    "update_scene",
    "delete_scene",
    "activate_scene",
    "create_playlist",
    "update_playlist",
    "delete_playlist",
    "start_playlist",
    "stop_playlist",
    "upsert_colors",
    "delete_color",
)

# ============================================================================
# Controller state
# ============================================================================


@pytest.fixture
def virtuals() -> list[Virtual]:
    """Four virtuals: one running rainbow (active), three idle."""
    return [
        Virtual(id="strip", active=True, effect=Effect(type="rainbow", config={"speed": 2})),
        Virtual(id="matrix", active=False),
        Virtual(id="ring", active=False),
        Virtual(id="wall", active=False),
    ]


@pytest.fixture
def effect_schemas() -> dict:
    return {
        "rainbow": {"name": "Rainbow"},
        "gradient": {"name": "Gradient"},
        "energy": {"name": "Energy"},
        "blender": {"name": "Blender"},
    }


@pytest.fixture
def color_catalog() -> ColorCatalog:
    return ColorCatalog(
        colors=ColorScope(builtin={"red": "#FF0000"}, user={"brand": "#112233"}),
        gradients=ColorScope(
            builtin={"Rainbow": "linear-gradient(90deg, #FF0000 0%, #0000FF 100%)"},
            user={
                "palette:sunset": "linear-gradient(90deg, #FF4500 0%, #FFD700 100%)",
                "palette:ocean": "linear-gradient(90deg, #000080 0%, #00FFFF 100%)",
                "warm": "linear-gradient(90deg, #FF0000 0%, #FFA500 100%)",
            },
        ),
    )


@pytest.fixture
def scenes() -> list[Scene]:
    return [Scene(id="scene-1", name="Scene 1"), Scene(id="scene-2", name="Scene 2")]


@pytest.fixture
def playlists() -> list[Playlist]:
    return [
        Playlist(
            id="evening",
            name="Evening",
            items=[
                {"scene_id": "a", "duration_ms": 1000},
                {"scene_id": "b", "duration_ms": 2000},
                {"scene_id": "c", "duration_ms": 3000},
            ],
            default_duration_ms=5000,
            timing={"jitter": {"enabled": True}},
            tags=["chill"],
            image="evening.png",
        )
    ]


@pytest.fixture
def presets() -> dict[str, PresetCatalog]:
    return {
        "rainbow": PresetCatalog(
            effect="rainbow",
            ledfx_presets={"cascade": {"config": {}}},
            user_presets={"mine": {"config": {}}},
        )
    }


# ============================================================================
# Controller double
# ============================================================================


@pytest.fixture
def make_controller(
    virtuals, effect_schemas, color_catalog, scenes, playlists, presets
) -> Callable[..., AsyncMock]:
    """Factory for controller doubles; keyword args override the fixtures."""

    def factory(**overrides) -> AsyncMock:
        state = {
            "virtuals": {v.id: v for v in overrides.get("virtuals", virtuals)},
            "scenes": overrides.get("scenes", scenes),
            "playlists": overrides.get("playlists", playlists),
            "presets": overrides.get("presets", presets),
        }
        apply_effects = overrides.get("apply_effects", True)

        client = AsyncMock(spec=LedFxClient)
        client.http = AsyncMock()

        async def get_virtuals():
            return list(state["virtuals"].values())

        async def get_virtual(virtual_id):
            return state["virtuals"][virtual_id]

        async def set_virtual_effect(virtual_id, effect_type, config=None):
            if apply_effects:
                current = state["virtuals"][virtual_id]
                state["virtuals"][virtual_id] = current.model_copy(
                    update={"effect": Effect(type=effect_type, config=config or {})}
                )

        async def update_virtual_config(virtual_id, config, *, active=None):
            return Virtual(id=virtual_id, config=config)

        async def get_scene(scene_id):
            for scene in state["scenes"]:
                if scene.id == scene_id:
                    return scene
            raise ControllerRejectedError(
                message="LedFx API error: 404 Not Found",
                method="GET",
                endpoint=f"/scenes/{scene_id}",
                url=f"http://ledfx.test/api/scenes/{scene_id}",
                status=404,
                status_text="Not Found",
            )

        async def get_scenes():
            return list(state["scenes"])

        async def get_playlists():
            return list(state["playlists"])

        async def get_playlist(playlist_id):
            return next((p for p in state["playlists"] if p.id == playlist_id), None)

        async def create_playlist(playlist):
            return playlist

        async def update_playlist(playlist_id, update: PlaylistUpdate, *, current=None):
            merged = current.model_dump(exclude_none=True)
            merged.update(update.model_dump(exclude_none=True))
            return Playlist.model_validate(merged)

        async def get_effect_presets(effect_type):
            return state["presets"].get(effect_type, PresetCatalog(effect=effect_type))

        client.get_virtuals.side_effect = get_virtuals
        client.get_virtual.side_effect = get_virtual
        client.set_virtual_effect.side_effect = set_virtual_effect
        client.update_virtual_config.side_effect = update_virtual_config
        client.get_scene.side_effect = get_scene
        client.get_scenes.side_effect = get_scenes
        client.get_playlists.side_effect = get_playlists
        client.get_playlist.side_effect = get_playlist
        client.create_playlist.side_effect = create_playlist
        client.update_playlist.side_effect = update_playlist
        client.get_effect_presets.side_effect = get_effect_presets
        client.get_effect_schemas.return_value = overrides.get("effect_schemas", effect_schemas)
        client.get_colors.return_value = overrides.get("color_catalog", color_catalog)
        return client

    return factory


@pytest.fixture
def controller(make_controller) -> AsyncMock:
    return make_controller()


@pytest.fixture
def fast_polling() -> PollingPolicy:
    return PollingPolicy(attempts=3, delay_s=0.0)


@pytest.fixture
def assert_no_writes() -> Callable[[AsyncMock], None]:
    """Assert that no write method of a controller double was awaited."""

    def check(client: AsyncMock) -> None:
        called = [name for name in WRITE_METHODS if getattr(client, name).await_count]
        assert called == [], f"unexpected controller writes: {called}"

    return check
