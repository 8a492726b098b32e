"""Bounded polling for writes the controller applies asynchronously."""

from __future__ import annotations

import asyncio
import logging

from pydantic import BaseModel, ConfigDict, Field

from ledwarden.core.api.ledfx.client import LedFxClient
from ledwarden.core.errors import PreconditionFailedError

logger = logging.getLogger(__name__)


class PollingPolicy(BaseModel):
    """Fixed-delay polling budget.

    Attributes:
        attempts: Number of reads before giving up
        delay_s: Sleep between reads (not after the last one)
    """

    model_config = ConfigDict(frozen=True)

    attempts: int = Field(default=3, ge=1)
    delay_s: float = Field(default=0.15, ge=0.0)


async def wait_for_effect_applied(
    client: LedFxClient,
    virtual_id: str,
    expected_effect: str,
    policy: PollingPolicy | None = None,
) -> bool:
    """Poll a virtual until it reports ``expected_effect`` (case-insensitive).

    Returns:
        True once observed, False when the budget is exhausted
    """
    policy = policy or PollingPolicy()
    expected = expected_effect.lower()
    for attempt in range(1, policy.attempts + 1):
        virtual = await client.get_virtual(virtual_id)
        applied = virtual.effect_type
        if applied and applied.lower() == expected:
            logger.debug(f"'{expected_effect}' applied to '{virtual_id}' after {attempt} read(s)")
            return True
        if attempt < policy.attempts:
            await asyncio.sleep(policy.delay_s)
    logger.warning(
        f"'{expected_effect}' not observed on '{virtual_id}' after {policy.attempts} read(s)"
    )
    return False


async def ensure_effect_applied(
    client: LedFxClient,
    virtual_id: str,
    expected_effect: str,
    policy: PollingPolicy | None = None,
    *,
    step: str,
) -> None:
    """Like wait_for_effect_applied, but raise when the budget runs out.

    Raises:
        PreconditionFailedError: If the effect was never observed
    """
    if not await wait_for_effect_applied(client, virtual_id, expected_effect, policy):
        raise PreconditionFailedError(
            f"LedFx did not apply '{expected_effect}' to '{virtual_id}'.",
            step=step,
            virtual_id=virtual_id,
            expected=expected_effect,
        )
