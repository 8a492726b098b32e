"""Validated, in-place writes against the controller."""

from ledwarden.core.mutations.colors import ColorEntry, ColorMutator
from ledwarden.core.mutations.effects import EffectMutator, TransitionConfig
from ledwarden.core.mutations.playlists import PATCH_OPERATIONS, PlaylistMutator
from ledwarden.core.mutations.scenes import SceneMutator, SceneRefreshReport, SceneRefreshResult

__all__ = [
    "PATCH_OPERATIONS",
    "ColorEntry",
    "ColorMutator",
    "EffectMutator",
    "PlaylistMutator",
    "SceneMutator",
    "SceneRefreshReport",
    "SceneRefreshResult",
    "TransitionConfig",
]
