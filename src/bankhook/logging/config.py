"""Logging configuration management for the Bankhook server.

This module provides centralized logging configuration shared by the HTTP
server and the CLI commands.
"""

import logging
import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path


@dataclass
class LoggingConfig:
    """Configuration settings for application logging."""

    level: str = "INFO"
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    cli_format_string: str = "%(message)s"
    log_to_file: bool = False
    log_file_path: Path = Path("logs/bankhook.log")
    max_file_size_mb: int = 10
    backup_count: int = 3
    force_reconfigure: bool = False

    @classmethod
    def from_environment(cls) -> "LoggingConfig":
        """Create logging configuration from environment variables.

        Returns:
            LoggingConfig: Configuration loaded from environment
        """
        return cls(
            level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_to_file=os.getenv("LOG_TO_FILE", "false").lower() == "true",
            log_file_path=Path(os.getenv("LOG_FILE_PATH", "logs/bankhook.log")),
            max_file_size_mb=int(os.getenv("LOG_MAX_FILE_SIZE_MB", "10")),
            backup_count=int(os.getenv("LOG_BACKUP_COUNT", "3")),
        )


def setup_logging(
    config: LoggingConfig | None = None,
    cli_mode: bool = False,
    verbose: bool = False,
) -> None:
    """Set up centralized logging configuration for the application.

    Args:
        config: Optional logging configuration. If None, loads from environment.
        cli_mode: If True, use simplified CLI-friendly formatting
        verbose: If True, enable DEBUG level logging (overrides config level)
    """
    if config is None:
        config = LoggingConfig.from_environment()

    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, config.level)

    handlers: list[logging.Handler] = []

    # Console handler (always present); stdout is left to command output
    console_handler = logging.StreamHandler(sys.stderr)
    if cli_mode:
        console_handler.setFormatter(logging.Formatter(config.cli_format_string))
    else:
        console_handler.setFormatter(logging.Formatter(config.format_string))
    handlers.append(console_handler)

    if config.log_to_file:
        config.log_file_path.parent.mkdir(parents=True, exist_ok=True)

        from logging.handlers import RotatingFileHandler

        file_handler = RotatingFileHandler(
            config.log_file_path,
            maxBytes=config.max_file_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
        )
        file_handler.setFormatter(logging.Formatter(config.format_string))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        handlers=handlers,
        force=config.force_reconfigure,
    )

    # Set specific logger levels for third-party libraries to reduce noise
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("plaid").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def setup_server_logging(verbose: bool = False) -> None:
    """Replace the CLI logging setup with the server's.

    The CLI callback has already configured the root logger for command
    output by the time ``serve`` runs, so the handlers are forcibly replaced
    with timestamped ones. A DEBUG level chosen by the global ``--verbose``
    flag carries over.

    Args:
        verbose: If True, enable DEBUG level logging
    """
    verbose = verbose or logging.getLogger().level == logging.DEBUG
    config = replace(LoggingConfig.from_environment(), force_reconfigure=True)
    setup_logging(config, cli_mode=False, verbose=verbose)
