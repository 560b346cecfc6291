"""Core utilities: configuration-free helpers, HTTP clients and mapping providers."""
