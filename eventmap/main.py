"""Cloud Function Entry Point.

This module provides the entry point for Google Cloud Functions.
It's a thin wrapper that loads configuration and invokes the API handler.
"""

import json
import logging
import os

import functions_framework
from flask import Request, Response

from eventmap.api_handler import handle_map_request
from eventmap.core.config import validate_config
from eventmap.shell.config_loader import load_config, load_config_from_env


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _get_config():
    """Load configuration from file, then apply environment overrides."""
    config = load_config_from_env(load_config())

    result = validate_config(config)
    for error in result.errors:
        log = logger.warning if error.severity == "warning" else logger.error
        log("Config %s: %s", error.field, error.message)

    return config


@functions_framework.http
def event_map(request: Request) -> Response:
    """HTTP Cloud Function entry point.

    Args:
        request: Flask request object

    Returns:
        JSON response with the map view
    """
    try:
        config = _get_config()
        return handle_map_request(request, config)
    except Exception as e:
        logger.exception("Unexpected error in event map")
        return Response(
            json.dumps({"error": type(e).__name__}),
            status=500,
            mimetype="application/json",
        )
