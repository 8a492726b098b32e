"""Reference checks that gate every controller write."""

from ledwarden.core.validation.references import (
    RESET_PRESET,
    ReferenceValidator,
    ReferenceViolation,
    raise_for_violations,
)

__all__ = ["RESET_PRESET", "ReferenceValidator", "ReferenceViolation", "raise_for_violations"]
