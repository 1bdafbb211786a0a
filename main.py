"""
Entry point of the board backend.

Loads configuration from the environment (.env supported), configures loguru
and serves the FastAPI application with uvicorn.

    python main.py
"""

import sys

import uvicorn

from config.settings import config
from logger import configure_logging, logger


def main() -> int:
    configure_logging(config.app)

    if not config.validate():
        return 1

    logger.info(f"configuration: {config.to_dict()}")
    logger.info(f"listening on {config.server.host}:{config.server.port}")

    try:
        uvicorn.run(
            "api.app:create_app",
            factory=True,
            host=config.server.host,
            port=config.server.port,
            timeout_graceful_shutdown=config.server.shutdown_timeout,
            log_config=None,
        )
    except KeyboardInterrupt:
        logger.info("interrupted by user")
    except Exception as e:
        logger.exception(f"server failed: {e}")
        raise
    return 0


if __name__ == "__main__":
    sys.exit(main())
