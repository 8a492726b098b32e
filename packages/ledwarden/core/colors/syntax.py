"""Syntax checks for color and gradient literals.

LedFx stores whatever string it is given and only fails later, at render
time, so every literal is checked here before it is written:

- colors: strict ``#RRGGBB`` or ``#RRGGBBAA``
- gradients: ``linear-gradient(<direction>?, <color> <pct>%, ...)`` with at
  least two stops and non-decreasing percentages in [0, 100]
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict

from ledwarden.core.errors import SyntaxValidationError

ColorKind = Literal["color", "gradient"]

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{8})")
_FUNCTION = re.compile(r"^\s*([A-Za-z-]+)\((.*)\)\s*$", re.DOTALL)
_ANGLE = re.compile(r"^-?\d+(?:\.\d+)?(?:deg|rad|turn)$", re.IGNORECASE)
_SIDE = r"(?:left|right|top|bottom)"
_TO_SIDE = re.compile(rf"^to\s+{_SIDE}(?:\s+{_SIDE})?$", re.IGNORECASE)
_BARE_PERCENT = re.compile(r"^-?\d+(?:\.\d+)?%$")
_STOP = re.compile(r"^(?P<color>.+?)\s+(?P<pct>-?\d+(?:\.\d+)?)%$", re.DOTALL)

GRADIENT_FUNCTION = "linear-gradient"


class SyntaxCheck(BaseModel):
    """Outcome of a syntax check; ``reason`` names the defect when invalid."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    reason: str | None = None

    @classmethod
    def ok(cls) -> SyntaxCheck:
        return cls(valid=True)

    @classmethod
    def fail(cls, reason: str) -> SyntaxCheck:
        return cls(valid=False, reason=reason)


def validate_color(value: str) -> SyntaxCheck:
    """Check a hex color literal (``#RRGGBB`` or ``#RRGGBBAA``)."""
    if not isinstance(value, str) or not _HEX_COLOR.fullmatch(value):
        return SyntaxCheck.fail(f"'{value}' is not a #RRGGBB or #RRGGBBAA hex color")
    return SyntaxCheck.ok()


def split_top_level(args: str) -> list[str] | None:
    """Split on commas that are not nested inside parentheses.

    ``rgb(255, 0, 0) 0%, #00FF00 100%`` yields two parts, not four.

    Returns:
        Stripped parts, or None if the parentheses are unbalanced
    """
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in args:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                return None
        if ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    if depth != 0:
        return None
    parts.append("".join(current).strip())
    return parts


def is_direction(token: str) -> bool:
    """Whether ``token`` is a gradient direction (angle or ``to <side>``)."""
    token = token.strip()
    return bool(_ANGLE.match(token) or _TO_SIDE.match(token))


def validate_gradient(value: str) -> SyntaxCheck:
    """Check a CSS ``linear-gradient(...)`` literal.

    Every stop must carry an explicit percentage; LedFx silently
    misrenders gradients that rely on implicit stop spacing.
    """
    if not isinstance(value, str):
        return SyntaxCheck.fail("gradient must be a string")

    match = _FUNCTION.match(value)
    if not match:
        return SyntaxCheck.fail(f"expected {GRADIENT_FUNCTION}(...)")
    name, args = match.group(1), match.group(2)
    if name.lower() != GRADIENT_FUNCTION:
        return SyntaxCheck.fail(f"wrong function name '{name}', expected {GRADIENT_FUNCTION}")

    parts = split_top_level(args)
    if parts is None:
        return SyntaxCheck.fail("unbalanced parentheses")

    if parts and is_direction(parts[0]):
        parts = parts[1:]
    if len(parts) < 2:
        return SyntaxCheck.fail(f"too few stops ({len(parts)}), at least 2 are required")

    previous: float | None = None
    for index, stop in enumerate(parts, start=1):
        if not stop or _BARE_PERCENT.match(stop):
            return SyntaxCheck.fail(f"missing color in stop {index}")
        stop_match = _STOP.match(stop)
        if not stop_match:
            return SyntaxCheck.fail(
                f"missing percentage in stop {index} ('{stop}'); "
                "gradients require explicit percentage stops"
            )
        pct = float(stop_match.group("pct"))
        if pct < 0 or pct > 100:
            return SyntaxCheck.fail(
                f"out-of-range percentage {stop_match.group('pct')}% in stop {index} "
                "(must be within 0-100)"
            )
        if previous is not None and pct < previous:
            return SyntaxCheck.fail(
                f"decreasing percentage in stop {index} "
                f"({stop_match.group('pct')}% after {previous:g}%)"
            )
        previous = pct

    return SyntaxCheck.ok()


def validate_color_value(kind: ColorKind, value: str) -> SyntaxCheck:
    """Validate a literal of the declared kind."""
    if kind == "color":
        return validate_color(value)
    if kind == "gradient":
        return validate_gradient(value)
    return SyntaxCheck.fail(f"unknown kind '{kind}', expected 'color' or 'gradient'")


def describe_failure(kind: ColorKind, value: str, check: SyntaxCheck) -> str:
    return f"Invalid {kind} '{value}': {check.reason}"


def ensure_valid(kind: ColorKind, value: str) -> str:
    """Return ``value`` unchanged, or raise SyntaxValidationError."""
    check = validate_color_value(kind, value)
    if not check.valid:
        raise SyntaxValidationError(describe_failure(kind, value, check))
    return value
