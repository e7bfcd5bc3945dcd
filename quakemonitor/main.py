"""Service Entry Point.

This module provides the entry point for the dashboard service.
It's a thin wrapper that configures logging and builds the application.
"""

import logging
import os

from quakemonitor.api import create_app
from quakemonitor.shell.config_loader import load_config


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


config = load_config()
logging.getLogger().setLevel(getattr(logging, config.log_level, logging.INFO))

app = create_app(config)


# For local testing
if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", "8080"))
    logger.info("Starting quake monitor on port %d", port)
    uvicorn.run(app, host="0.0.0.0", port=port)
