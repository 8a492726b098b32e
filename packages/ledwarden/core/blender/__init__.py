"""Blender composition across three source virtuals."""

from ledwarden.core.blender.orchestrator import (
    BLENDER_ROLES,
    BlenderOrchestrator,
    BlenderResult,
    BlenderSource,
)

__all__ = ["BLENDER_ROLES", "BlenderOrchestrator", "BlenderResult", "BlenderSource"]
