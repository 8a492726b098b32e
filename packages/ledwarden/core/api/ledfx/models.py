"""Pydantic models for LedFx controller payloads.

Models allow extra fields: anything the controller sends that is not modeled
here round-trips unchanged when the model is dumped back into a request.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

PresetCategory = Literal["ledfx_presets", "user_presets"]
PRESET_CATEGORIES: tuple[PresetCategory, ...] = ("ledfx_presets", "user_presets")

SceneAction = Literal["activate", "ignore", "stop", "forceblack"]
PlaylistMode = Literal["sequence", "shuffle"]

BLENDER_EFFECT = "blender"
DEFAULT_SCENE_DURATION_MS = 15000


class Effect(BaseModel):
    """Effect currently assigned to a virtual."""

    model_config = ConfigDict(extra="allow")

    type: str | None = None
    config: dict[str, Any] = Field(default_factory=dict)


class Virtual(BaseModel):
    """Addressable logical LED output."""

    model_config = ConfigDict(extra="allow")

    id: str
    active: bool = False
    config: dict[str, Any] = Field(default_factory=dict)
    effect: Effect | None = None

    @property
    def effect_type(self) -> str | None:
        return self.effect.type if self.effect else None


class Device(BaseModel):
    """Physical LED device (pass-through only)."""

    model_config = ConfigDict(extra="allow")

    id: str
    type: str | None = None
    config: dict[str, Any] = Field(default_factory=dict)


class SceneVirtual(BaseModel):
    """One virtual's captured state inside a scene."""

    model_config = ConfigDict(extra="allow")

    type: str | None = None
    config: dict[str, Any] = Field(default_factory=dict)
    action: SceneAction | None = None
    preset: str | None = None
    preset_category: PresetCategory | None = None


class Scene(BaseModel):
    """Named snapshot of effect assignments across virtuals."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    scene_tags: str | None = None
    virtuals: dict[str, SceneVirtual] | None = None

    def has_blender(self) -> bool:
        """Whether any captured virtual runs the blender effect."""
        if not self.virtuals:
            return False
        return any((v.type or "").lower() == BLENDER_EFFECT for v in self.virtuals.values())


class SceneUpdate(BaseModel):
    """Full in-place scene payload sent to the controller.

    Scene-level keys the controller stores beyond the declared ones, such as
    ``scene_image`` or ``scene_midiactivate``, ride along as extras.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    scene_tags: str | None = None
    virtuals: dict[str, SceneVirtual] = Field(default_factory=dict)


class PlaylistItem(BaseModel):
    """One timed scene reference inside a playlist."""

    model_config = ConfigDict(extra="allow")

    scene_id: str
    duration_ms: int | None = None


class Playlist(BaseModel):
    """Ordered, timed sequence of scene references.

    Metadata such as ``timing``, ``tags`` and ``image`` is kept as extra
    fields and carried over unchanged on update.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    items: list[PlaylistItem] = Field(default_factory=list)
    mode: PlaylistMode = "sequence"
    default_duration_ms: int | None = None


class PlaylistUpdate(BaseModel):
    """Supplied playlist fields; unset fields are left untouched remotely."""

    name: str | None = None
    items: list[PlaylistItem] | None = None
    mode: PlaylistMode | None = None
    default_duration_ms: int | None = None


class PlaylistState(BaseModel):
    """Runtime state of the playlist player."""

    model_config = ConfigDict(extra="allow")

    active_playlist: str | None = None
    index: int | None = None
    paused: bool | None = None
    scene_id: str | None = None


class ColorScope(BaseModel):
    builtin: dict[str, str] = Field(default_factory=dict)
    user: dict[str, str] = Field(default_factory=dict)


class ColorCatalog(BaseModel):
    """Response of the color store: colors and gradients, built-in and user."""

    colors: ColorScope = Field(default_factory=ColorScope)
    gradients: ColorScope = Field(default_factory=ColorScope)


class PresetCatalog(BaseModel):
    """Presets for one effect type, keyed by preset id, per category."""

    model_config = ConfigDict(extra="allow")

    effect: str | None = None
    ledfx_presets: dict[str, Any] = Field(default_factory=dict)
    user_presets: dict[str, Any] = Field(default_factory=dict)

    def category(self, name: PresetCategory) -> dict[str, Any]:
        return self.ledfx_presets if name == "ledfx_presets" else self.user_presets

    def contains(self, preset_id: str, category: PresetCategory | None = None) -> bool:
        """Whether the preset exists in ``category``, or in either when None."""
        if category is not None:
            return preset_id in self.category(category)
        return preset_id in self.ledfx_presets or preset_id in self.user_presets
