"""Event map engine: marker clustering and location filtering for events."""
