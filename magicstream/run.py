#!/usr/bin/env python3
"""
Command-line entry point for the MagicStream Movies API.
Imports the FastAPI app and runs uvicorn programmatically on the configured port.
"""
import logging
import sys

import uvicorn

logger = logging.getLogger(__name__)


def run_server(app, host: str, port: int) -> bool:
    """
    Serves app until shutdown.

    Returns False when the server could not start (e.g. the port is already
    bound). The failure is printed as a diagnostic instead of propagating.
    """
    try:
        uvicorn.run(app, host=host, port=port, log_level="info")
    except SystemExit as e:
        # uvicorn logs the bind error itself and calls sys.exit(1)
        if e.code in (None, 0):
            return True
        reason = f"exit status {e.code}"
    except OSError as e:
        reason = str(e)
    else:
        return True

    print(f"Failed to start server on {host}:{port}: {reason}")
    logger.error(f"Failed to start server on {host}:{port}: {reason}")
    return False


def main() -> int:
    """Main entry point for the application"""
    try:
        from magicstream.core.config import settings
        from magicstream.server import app
    except RuntimeError as e:
        # Missing or invalid configuration
        print(f"Failed to start server: {e}")
        logger.error(f"Failed to start server: {e}")
        return 1

    logger.info(f"Starting server on {settings.HOST}:{settings.PORT}")
    return 0 if run_server(app, settings.HOST, settings.PORT) else 1


if __name__ == "__main__":
    sys.exit(main())
