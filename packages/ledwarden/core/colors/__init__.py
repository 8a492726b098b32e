"""Color and gradient literals: syntax checks and palette references."""

from ledwarden.core.colors.palettes import (
    PALETTE_PREFIX,
    Palette,
    build_palette_gradient,
    list_palettes,
    list_user_gradient_ids,
    palette_id,
    resolve_gradient_reference,
    resolve_palette_gradient,
)
from ledwarden.core.colors.syntax import (
    SyntaxCheck,
    validate_color,
    validate_color_value,
    validate_gradient,
)

__all__ = [
    "PALETTE_PREFIX",
    "Palette",
    "SyntaxCheck",
    "build_palette_gradient",
    "list_palettes",
    "list_user_gradient_ids",
    "palette_id",
    "resolve_gradient_reference",
    "resolve_palette_gradient",
    "validate_color",
    "validate_color_value",
    "validate_gradient",
]
