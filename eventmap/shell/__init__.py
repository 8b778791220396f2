"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems
or holds mutable state:
- Events feed client (HTTP)
- Configuration loading (environment/files)
- Selection state holder

Keep this layer thin and simple. All map logic should be in core.
"""

from eventmap.shell.events_client import EventsClient
from eventmap.shell.config_loader import load_config, load_config_from_env
from eventmap.shell.selection_manager import SelectionStateManager

__all__ = [
    "EventsClient",
    "load_config",
    "load_config_from_env",
    "SelectionStateManager",
]
