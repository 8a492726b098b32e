"""Tests for the service facade and its envelopes."""

from __future__ import annotations

import logging

import httpx
import pytest

from ledwarden.core.blender.orchestrator import BlenderSource
from ledwarden.core.config.models import AppConfig
from ledwarden.core.service import LedWardenService
from ledwarden.core.utils.logging import OPERATIONS_LOGGER


@pytest.fixture
def service(controller, fast_polling) -> LedWardenService:
    return LedWardenService(controller, polling=fast_polling)


class TestRun:
    @pytest.mark.asyncio
    async def test_success_envelope(self, service) -> None:
        result = await service.run(
            "create_playlist",
            service.create_playlist("party", "Party", ["scene-1"], duration_ms=4000),
        )

        assert result["ok"] is True
        assert result["data"]["id"] == "party"
        assert result["data"]["items"] == [{"scene_id": "scene-1", "duration_ms": 4000}]

    @pytest.mark.asyncio
    async def test_validation_failure_envelope(self, service, assert_no_writes) -> None:
        result = await service.run(
            "create_playlist", service.create_playlist("party", "Party", ["ghost"])
        )

        assert result == {
            "ok": False,
            "error": {
                "code": "VALIDATION_ERROR",
                "kind": "validation",
                "message": "Missing scene IDs: ghost",
                "violations": ["Missing scene IDs: ghost"],
            },
        }
        assert_no_writes(service.client)

    @pytest.mark.asyncio
    async def test_precondition_envelope(self, make_controller, fast_polling) -> None:
        service = LedWardenService(make_controller(apply_effects=False), polling=fast_polling)
        result = await service.run(
            "set_blender",
            service.set_blender(
                "wall",
                BlenderSource(virtual_id="strip", effect_type="energy"),
                BlenderSource(virtual_id="matrix", effect_type="energy"),
                BlenderSource(virtual_id="ring", effect_type="rainbow"),
            ),
        )

        assert result["ok"] is False
        assert result["error"]["kind"] == "precondition"
        assert result["error"]["step"] == "source:background"

    @pytest.mark.asyncio
    async def test_unexpected_exception_propagates(self, service) -> None:
        service.client.get_virtuals.side_effect = RuntimeError("bug")
        with pytest.raises(RuntimeError):
            await service.run("set_effect", service.set_effect("strip", "rainbow"))

    @pytest.mark.asyncio
    async def test_operation_logged(self, service, caplog) -> None:
        caplog.set_level(logging.INFO, logger=OPERATIONS_LOGGER)
        await service.run("delete_scene", service.delete_scene("scene-1"), scene_id="scene-1")

        records = [r for r in caplog.records if r.name == OPERATIONS_LOGGER]
        assert records[-1].operation == "delete_scene"
        assert records[-1].fields == {"scene_id": "scene-1"}
        service.client.delete_scene.assert_awaited_once_with("scene-1")


class TestDelegation:
    @pytest.mark.asyncio
    async def test_refresh_report(self, service) -> None:
        report = await service.refresh_blender_scenes()
        assert report.updated == 0
        assert report.failed == 0

    @pytest.mark.asyncio
    async def test_palettes_listed(self, service) -> None:
        result = await service.run("list_palettes", service.list_palettes())
        assert [p["name"] for p in result["data"]] == ["ocean", "sunset"]


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_from_config(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"scenes": {"intro": {"name": "Intro"}}})

        config = AppConfig.model_validate({"polling": {"attempts": 2, "delay_ms": 0}})
        async with LedWardenService.from_config(
            config, transport=httpx.MockTransport(handler)
        ) as svc:
            assert svc.polling.attempts == 2
            scenes = await svc.client.get_scenes()

        assert [s.id for s in scenes] == ["intro"]
