"""Playlist create, upsert and item patching.

The controller replaces a playlist wholesale on write, so every update is a
fresh read, a local change and one write of the merged result. Metadata the
caller did not touch (``timing``, ``tags``, ``image``, ...) is sent back as
it was read.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Literal

from ledwarden.core.api.ledfx.client import LedFxClient
from ledwarden.core.api.ledfx.models import (
    DEFAULT_SCENE_DURATION_MS,
    Playlist,
    PlaylistItem,
    PlaylistMode,
    PlaylistUpdate,
)
from ledwarden.core.errors import ReferenceValidationError, ValidationFailedError
from ledwarden.core.validation.references import ReferenceValidator, raise_for_violations

logger = logging.getLogger(__name__)

PatchOperation = Literal["append", "remove", "move", "replace_duration"]
PATCH_OPERATIONS: tuple[PatchOperation, ...] = ("append", "remove", "move", "replace_duration")


def _check_duration(duration_ms: int | None) -> None:
    if duration_ms is None:
        return
    if isinstance(duration_ms, bool) or not isinstance(duration_ms, int) or duration_ms <= 0:
        raise ValidationFailedError(
            f"duration_ms must be a positive integer, got {duration_ms!r}."
        )


def _check_index(name: str, index: int | None, count: int) -> int:
    if index is None:
        raise ValidationFailedError(f"{name} is required.")
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < count:
        raise ValidationFailedError(
            f"{name} {index!r} is out of range for a playlist with {count} item(s)."
        )
    return index


class PlaylistMutator:
    """Validated playlist writes.

    Args:
        client: Controller client
        validator: Reference validator (built from ``client`` when omitted)
    """

    def __init__(self, client: LedFxClient, validator: ReferenceValidator | None = None):
        self.client = client
        self.validator = validator or ReferenceValidator(client)

    async def _require(self, playlist_id: str) -> Playlist:
        playlist = await self.client.get_playlist(playlist_id)
        if playlist is None:
            raise ReferenceValidationError(f"Playlist '{playlist_id}' not found.")
        return playlist

    async def _validate_scene_ids(self, scene_ids: Sequence[str]) -> None:
        raise_for_violations(await self.validator.validate_playlist_scene_ids(scene_ids))

    async def create_playlist(
        self,
        playlist_id: str,
        name: str,
        scene_ids: Sequence[str],
        *,
        duration_ms: int | None = None,
        mode: PlaylistMode = "sequence",
    ) -> Playlist:
        """Create a playlist of existing scenes.

        Raises:
            ValidationFailedError: If the name or the scene list is empty
            ReferenceValidationError: If any scene id does not exist
        """
        if not name or not name.strip():
            raise ValidationFailedError("Playlist name must not be empty.")
        if not scene_ids:
            raise ValidationFailedError("A playlist needs at least one scene.")
        _check_duration(duration_ms)
        await self._validate_scene_ids(scene_ids)

        duration = duration_ms or DEFAULT_SCENE_DURATION_MS
        playlist = Playlist(
            id=playlist_id,
            name=name,
            items=[PlaylistItem(scene_id=sid, duration_ms=duration) for sid in scene_ids],
            mode=mode,
            default_duration_ms=duration,
        )
        created = await self.client.create_playlist(playlist)
        logger.info(f"Created playlist '{playlist_id}' with {len(scene_ids)} scene(s)")
        return created

    async def update_playlist(
        self,
        playlist_id: str,
        *,
        name: str | None = None,
        scene_ids: Sequence[str] | None = None,
        duration_ms: int | None = None,
        mode: PlaylistMode | None = None,
    ) -> Playlist:
        """Change only the supplied fields of an existing playlist."""
        current = await self._require(playlist_id)
        return await self._update(
            current, name=name, scene_ids=scene_ids, duration_ms=duration_ms, mode=mode
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
        """Update the playlist if it exists, otherwise create it.

        Creation needs ``name`` and a non-empty ``scene_ids``.
        """
        current = await self.client.get_playlist(playlist_id)
        if current is None:
            return await self.create_playlist(
                playlist_id,
                name or "",
                scene_ids or [],
                duration_ms=duration_ms,
                mode=mode or "sequence",
            )
        return await self._update(
            current, name=name, scene_ids=scene_ids, duration_ms=duration_ms, mode=mode
        )

    async def _update(
        self,
        current: Playlist,
        *,
        name: str | None,
        scene_ids: Sequence[str] | None,
        duration_ms: int | None,
        mode: PlaylistMode | None,
    ) -> Playlist:
        if name is not None and not name.strip():
            raise ValidationFailedError("Playlist name must not be empty.")
        if scene_ids is not None and not scene_ids:
            raise ValidationFailedError("A playlist needs at least one scene.")
        _check_duration(duration_ms)

        update = PlaylistUpdate(name=name, mode=mode, default_duration_ms=duration_ms)
        if scene_ids is not None:
            await self._validate_scene_ids(scene_ids)
            duration = duration_ms or current.default_duration_ms or DEFAULT_SCENE_DURATION_MS
            update.items = [PlaylistItem(scene_id=sid, duration_ms=duration) for sid in scene_ids]

        updated = await self.client.update_playlist(current.id, update, current=current)
        logger.info(f"Updated playlist '{current.id}' in place")
        return updated

    async def patch_items(
        self,
        playlist_id: str,
        operation: PatchOperation,
        *,
        index: int | None = None,
        to_index: int | None = None,
        scene_id: str | None = None,
        duration_ms: int | None = None,
    ) -> Playlist:
        """Apply one item-level change and write the whole list back.

        Operations:
            append: add ``scene_id`` (validated) at the end
            remove: drop the item at ``index``, or the first with ``scene_id``;
                the last remaining item cannot be removed
            move: relocate the item at ``index`` to ``to_index``
            replace_duration: set ``duration_ms`` on the item at ``index``

        Raises:
            ValidationFailedError: Bad operation, missing argument or index out
                of range; nothing is written
            ReferenceValidationError: Unknown playlist or scene
        """
        if operation not in PATCH_OPERATIONS:
            raise ValidationFailedError(
                f"Unknown operation '{operation}'. Expected one of: {', '.join(PATCH_OPERATIONS)}."
            )
        _check_duration(duration_ms)

        current = await self._require(playlist_id)
        items = list(current.items)
        count = len(items)

        if operation == "append":
            if not scene_id:
                raise ValidationFailedError("scene_id is required to append.")
            await self._validate_scene_ids([scene_id])
            duration = duration_ms or current.default_duration_ms or DEFAULT_SCENE_DURATION_MS
            items.append(PlaylistItem(scene_id=scene_id, duration_ms=duration))
        elif operation == "remove":
            if index is not None:
                items.pop(_check_index("index", index, count))
            elif scene_id:
                position = next((i for i, it in enumerate(items) if it.scene_id == scene_id), None)
                if position is None:
                    raise ValidationFailedError(
                        f"Scene '{scene_id}' is not in playlist '{playlist_id}'."
                    )
                items.pop(position)
            else:
                raise ValidationFailedError("remove needs an index or a scene_id.")
            if not items:
                raise ValidationFailedError(
                    f"Removing the last scene would empty playlist '{playlist_id}'; "
                    "a playlist needs at least one scene."
                )
        elif operation == "move":
            src = _check_index("index", index, count)
            dst = _check_index("to_index", to_index, count)
            items.insert(dst, items.pop(src))
        else:
            target = _check_index("index", index, count)
            if duration_ms is None:
                raise ValidationFailedError("duration_ms is required to replace a duration.")
            items[target] = items[target].model_copy(update={"duration_ms": duration_ms})

        updated = await self.client.update_playlist(
            playlist_id, PlaylistUpdate(items=items), current=current
        )
        logger.info(f"Patched playlist '{playlist_id}' ({operation})")
        return updated

    async def add_scene(
        self, playlist_id: str, scene_id: str, duration_ms: int | None = None
    ) -> Playlist:
        return await self.patch_items(
            playlist_id, "append", scene_id=scene_id, duration_ms=duration_ms
        )
