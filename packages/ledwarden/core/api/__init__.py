"""Controller API clients."""
