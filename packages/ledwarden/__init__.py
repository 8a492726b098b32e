"""ledwarden: reference-integrity validation and safe mutation for LedFx."""
