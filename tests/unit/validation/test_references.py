"""Tests for cross-entity reference validation."""

from __future__ import annotations

import pytest

from ledwarden.core.api.ledfx.models import ColorCatalog, SceneVirtual
from ledwarden.core.errors import ReferenceValidationError
from ledwarden.core.validation.references import (
    ReferenceValidator,
    ReferenceViolation,
    effect_types_from_schemas,
    raise_for_violations,
)


class TestValidateSceneVirtuals:
    @pytest.mark.asyncio
    async def test_valid_map(self, controller) -> None:
        validator = ReferenceValidator(controller)
        violations = await validator.validate_scene_virtuals(
            {"strip": SceneVirtual(type="rainbow", action="activate")}
        )
        assert violations == []

    @pytest.mark.asyncio
    async def test_unknown_virtual_reported_once(self, controller) -> None:
        validator = ReferenceValidator(controller)
        violations = await validator.validate_scene_virtuals(
            {
                "strip": SceneVirtual(type="rainbow"),
                "ghost": SceneVirtual(type="rainbow"),
            }
        )
        assert len(violations) == 1
        assert violations[0].kind == "virtual"
        assert "Unknown virtual 'ghost'" in violations[0].message

    @pytest.mark.asyncio
    async def test_unknown_effect_type(self, controller) -> None:
        validator = ReferenceValidator(controller)
        violations = await validator.validate_scene_virtuals(
            {"strip": SceneVirtual(type="plasma9000")}
        )
        assert [v.kind for v in violations] == ["effect_type"]
        assert "Unknown effect type 'plasma9000'" in violations[0].message

    @pytest.mark.asyncio
    async def test_untyped_entry_skips_effect_check(self, controller) -> None:
        validator = ReferenceValidator(controller)
        violations = await validator.validate_scene_virtuals(
            {"matrix": SceneVirtual(type="", action="ignore")}
        )
        assert violations == []

    @pytest.mark.asyncio
    async def test_missing_preset(self, controller) -> None:
        validator = ReferenceValidator(controller)
        violations = await validator.validate_scene_virtuals(
            {"strip": SceneVirtual(type="rainbow", preset="does-not-exist")}
        )
        assert len(violations) == 1
        assert "Preset 'does-not-exist' not found" in violations[0].message

    @pytest.mark.asyncio
    async def test_unscoped_preset_found_in_either_category(self, controller) -> None:
        validator = ReferenceValidator(controller)
        violations = await validator.validate_scene_virtuals(
            {
                "strip": SceneVirtual(type="rainbow", preset="cascade"),
                "matrix": SceneVirtual(type="rainbow", preset="mine"),
            }
        )
        assert violations == []

    @pytest.mark.asyncio
    async def test_scoped_preset_must_match_category(self, controller) -> None:
        validator = ReferenceValidator(controller)
        violations = await validator.validate_scene_virtuals(
            {
                "strip": SceneVirtual(
                    type="rainbow", preset="cascade", preset_category="user_presets"
                )
            }
        )
        assert len(violations) == 1
        assert "in user_presets" in violations[0].message

    @pytest.mark.asyncio
    async def test_reset_sentinel_is_not_looked_up(self, controller) -> None:
        validator = ReferenceValidator(controller)
        violations = await validator.validate_scene_virtuals(
            {"strip": SceneVirtual(type="rainbow", preset="reset")}
        )
        assert violations == []
        controller.get_effect_presets.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reads_once_per_call_and_caches_presets(self, controller) -> None:
        validator = ReferenceValidator(controller)
        await validator.validate_scene_virtuals(
            {
                "strip": SceneVirtual(type="rainbow", preset="cascade"),
                "matrix": SceneVirtual(type="rainbow", preset="mine"),
                "ring": SceneVirtual(type="energy"),
            }
        )
        assert controller.get_virtuals.await_count == 1
        assert controller.get_effect_schemas.await_count == 1
        controller.get_effect_presets.assert_awaited_once_with("rainbow")


class TestValidatePlaylistSceneIds:
    @pytest.mark.asyncio
    async def test_all_present(self, controller) -> None:
        validator = ReferenceValidator(controller)
        assert await validator.validate_playlist_scene_ids(["scene-1", "scene-2"]) == []

    @pytest.mark.asyncio
    async def test_missing_ids_aggregated(self, controller) -> None:
        validator = ReferenceValidator(controller)
        violations = await validator.validate_playlist_scene_ids(
            ["scene-1", "missing-a", "scene-2", "missing-b", "missing-a"]
        )
        assert len(violations) == 1
        assert violations[0].message == "Missing scene IDs: missing-a, missing-b"
        assert controller.get_scenes.await_count == 1


class TestHelpers:
    @pytest.mark.asyncio
    async def test_validate_virtuals_exist(self, controller) -> None:
        validator = ReferenceValidator(controller)
        violations = await validator.validate_virtuals_exist(["strip", "nope"])
        assert [v.ref for v in violations] == ["nope"]

    @pytest.mark.asyncio
    async def test_validate_effect_types(self, controller) -> None:
        validator = ReferenceValidator(controller)
        violations = await validator.validate_effect_types(["rainbow", "bogus"])
        assert [v.ref for v in violations] == ["bogus"]

    def test_validate_effect_config(self, controller, color_catalog: ColorCatalog) -> None:
        validator = ReferenceValidator(controller)
        config, violations = validator.validate_effect_config(
            {"gradient": "palette:ocean"}, color_catalog
        )
        assert violations == []
        assert config["gradient"].startswith("linear-gradient")

        _, violations = validator.validate_effect_config(
            {"gradient": "palette:missing"}, color_catalog
        )
        assert [v.kind for v in violations] == ["gradient"]

    def test_schema_keys_are_effect_types(self) -> None:
        assert effect_types_from_schemas({"rainbow": {}, "energy": {}}) == {"rainbow", "energy"}
        assert effect_types_from_schemas({"effects": {"rainbow": {}}}) == {"rainbow"}

    def test_raise_for_violations(self) -> None:
        raise_for_violations([])

        violations = [
            ReferenceViolation(kind="virtual", ref="a", message="Unknown virtual 'a'"),
            ReferenceViolation(kind="virtual", ref="b", message="Unknown virtual 'b'"),
        ]
        with pytest.raises(ReferenceValidationError) as exc_info:
            raise_for_violations(violations)
        assert exc_info.value.violations == ["Unknown virtual 'a'", "Unknown virtual 'b'"]
        assert exc_info.value.code == "VALIDATION_ERROR"
