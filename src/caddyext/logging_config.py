"""
Logging setup for caddyext.

Library modules import `logger` from here. The console sink writes to
stderr so stdout stays clean for command output; machine mode
(CADDYEXT_MACHINE_MODE) silences it. A file sink under .caddyext/logs/ is
opt-in via CADDYEXT_FILE_LOGGING.
"""

import os
import sys

from loguru import logger

CONSOLE_FORMAT = "<level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"

_logging_configured = False


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


def setup_logging(level=None, suppress_console=None, enable_file_logging=None):
    """
    Configures the global logger.

    The import-time call only runs once; explicit arguments always
    reconfigure, replacing every sink.

    Args:
        level: Minimum level for both sinks. If None, CADDYEXT_LOG_LEVEL or INFO.
        suppress_console: If None, check CADDYEXT_MACHINE_MODE.
        enable_file_logging: If None, check CADDYEXT_FILE_LOGGING.
    """
    global _logging_configured

    explicit = suppress_console is not None or enable_file_logging is not None
    if _logging_configured and not explicit:
        return
    _logging_configured = True

    logger.remove()

    if level is None:
        level = os.getenv("CADDYEXT_LOG_LEVEL", "INFO").upper()
    if suppress_console is None:
        suppress_console = _env_flag("CADDYEXT_MACHINE_MODE")
    if enable_file_logging is None:
        enable_file_logging = _env_flag("CADDYEXT_FILE_LOGGING")

    if not suppress_console:
        logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if enable_file_logging:
        from caddyext.paths import get_paths
        paths = get_paths()
        paths.ensure_dirs()
        logger.add(
            paths.logs_dir / "caddyext.log",
            level=level,
            format=FILE_FORMAT,
            rotation="10 MB",
        )


setup_logging()
