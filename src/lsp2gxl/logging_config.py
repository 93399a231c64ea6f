import sys
import os
from pathlib import Path
from loguru import logger

# Flag to track if logging has been configured
_logging_configured = False

LOG_DIR = Path(".lsp2gxl") / "logs"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


def setup_logging(level="INFO", suppress_console=None, enable_file_logging=None):
    """
    Configures the global logger.

    By default, only console logging is enabled. File logging is opt-in via
    LSP2GXL_FILE_LOGGING=1 environment variable or enable_file_logging=True.

    Args:
        level: Logging level (default: INFO)
        suppress_console: If True, suppress console logging. If None, check LSP2GXL_MACHINE_MODE env var.
        enable_file_logging: If True, enable file logging. If None, check LSP2GXL_FILE_LOGGING env var.
    """
    global _logging_configured

    # Only configure once to avoid duplicate handlers
    if _logging_configured:
        return
    _logging_configured = True

    logger.remove()

    if suppress_console is None:
        suppress_console = _env_flag("LSP2GXL_MACHINE_MODE")

    # Stream 1: Human-readable console output (only if not suppressed)
    if not suppress_console:
        logger.add(
            sys.stderr,
            level=level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
            colorize=True
        )

    # Stream 2: File logging is opt-in only
    if enable_file_logging is None:
        enable_file_logging = _env_flag("LSP2GXL_FILE_LOGGING")

    if enable_file_logging:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        logger.add(
            LOG_DIR / "lsp2gxl.log",
            level=level,
            rotation="10 MB",
            retention="1 day",
            compression="gz",
            catch=True,
            serialize=False
        )


def reset_logging():
    """Allow the next setup_logging() call to reconfigure the sinks."""
    global _logging_configured
    _logging_configured = False


# Configure the logger on import (will check env var for machine mode)
setup_logging()
