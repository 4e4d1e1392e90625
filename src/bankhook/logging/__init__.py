"""Centralized logging configuration for the Bankhook server.

Standard usage:
    ```python
    import logging
    from bankhook.logging import setup_logging

    # Configure once at application startup
    setup_logging()

    # Get loggers in each module
    logger = logging.getLogger(__name__)
    ```
"""

from .config import LoggingConfig, setup_logging, setup_server_logging

__all__ = ["LoggingConfig", "setup_logging", "setup_server_logging"]
