"""Typed LedFx controller client and payload models."""

from ledwarden.core.api.ledfx.client import LedFxClient
from ledwarden.core.api.ledfx.models import (
    BLENDER_EFFECT,
    ColorCatalog,
    Effect,
    Playlist,
    PlaylistItem,
    PlaylistState,
    PlaylistUpdate,
    PresetCatalog,
    Scene,
    SceneUpdate,
    SceneVirtual,
    Virtual,
)

__all__ = [
    "BLENDER_EFFECT",
    "ColorCatalog",
    "Effect",
    "LedFxClient",
    "Playlist",
    "PlaylistItem",
    "PlaylistState",
    "PlaylistUpdate",
    "PresetCatalog",
    "Scene",
    "SceneUpdate",
    "SceneVirtual",
    "Virtual",
]
