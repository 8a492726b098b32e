"""Error taxonomy shared by every ledwarden operation.

Every failure a caller can see belongs to exactly one ``ErrorKind`` so a
dispatcher can tell "fix your input" from "the controller said no" from
"the controller is unreachable" from "a multi-step operation stalled".
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Kind of failure, as reported to callers."""

    VALIDATION = "validation"
    CONTROLLER_REJECTION = "controller_rejection"
    TRANSPORT = "transport"
    PRECONDITION = "precondition"
    DECODE = "decode"


class LedWardenError(Exception):
    """Base exception for all ledwarden failures."""

    kind: ErrorKind = ErrorKind.VALIDATION
    code: str = "LEDWARDEN_ERROR"

    def to_dict(self) -> dict[str, Any]:
        """Structured representation used by error envelopes."""
        return {"code": self.code, "kind": self.kind.value, "message": str(self)}


class ValidationFailedError(LedWardenError):
    """A proposed mutation failed a syntax or reference check before any write."""

    kind = ErrorKind.VALIDATION
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, *, violations: list[str] | None = None) -> None:
        self.violations = list(violations) if violations else [message]
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["violations"] = self.violations
        return out


class SyntaxValidationError(ValidationFailedError):
    """A color or gradient literal is malformed."""


class ReferenceValidationError(ValidationFailedError):
    """A mutation references an entity the controller does not have."""


class PreconditionFailedError(LedWardenError):
    """A verification step did not observe the expected state in time.

    Attributes:
        step: Name of the step that failed (e.g. ``"source:background"``)
        virtual_id: Virtual that was being verified, if any
        expected: Expected value that was never observed
    """

    kind = ErrorKind.PRECONDITION
    code = "PRECONDITION_FAILED"

    def __init__(
        self,
        message: str,
        *,
        step: str,
        virtual_id: str | None = None,
        expected: str | None = None,
    ) -> None:
        self.step = step
        self.virtual_id = virtual_id
        self.expected = expected
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out.update(step=self.step, virtual_id=self.virtual_id, expected=self.expected)
        return out
