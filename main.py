"""Cloud Function Entry Point - Root Module.

This is the root-level entry point for Google Cloud Functions.
It imports from the eventmap package.
"""

from eventmap.main import event_map

__all__ = [
    "event_map",
]
