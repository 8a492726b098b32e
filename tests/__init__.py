"""Test suite for ledwarden.

Test Structure:
- unit/: Unit tests mirroring packages/ledwarden/core
  - api/: HTTP transport and LedFx client (httpx.MockTransport)
  - colors/, validation/: pure checks and controller-read validation
  - mutations/, blender/: write paths against an AsyncMock controller
- conftest.py: controller state fixtures and the controller double factory
"""
