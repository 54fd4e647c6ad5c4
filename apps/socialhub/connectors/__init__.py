"""External service connectors (MongoDB, media storage)."""
