#!/usr/bin/env python3
"""Google Calendar Gateway - Simple startup script."""

import sys
import os
import logging

# Add current directory to Python path for Docker compatibility
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import load_config
from infrastructure import CredentialRegistry
from monitoring import ConfigurationError
from presentation import create_app


logger = logging.getLogger(__name__)


def main():
    """Main entry point."""
    config = load_config()
    config.setup_logging()

    # A registry that fails to load must never serve traffic
    try:
        credential_registry = CredentialRegistry.from_file(
            config.calendar.credentials_path,
            subject=config.calendar.subject
        )
    except ConfigurationError as e:
        logger.critical(f"Unable to load credentials: {e.message}")
        sys.exit(1)

    app = create_app(config, credential_registry)

    logger.info(f"Ready to serve! Listening on {config.server.host}:{config.server.port}")

    try:
        app.run(
            host=config.server.host,
            port=config.server.port,
            debug=config.server.debug,
            use_reloader=False
        )
    except KeyboardInterrupt:
        logger.info("Shutting down server...")


if __name__ == '__main__':
    main()
