"""
AIOS Logging Configuration

Configurable logging with debug mode support.
"""

import os
import re
import logging
import sys
from pathlib import Path
from typing import Optional


# Check for debug mode
DEBUG_MODE = os.environ.get("AIOS_DEBUG", "").lower() in ("1", "true", "yes")

# Key names whose values are masked in key=value / key: value form
SECRET_PATTERNS = [
    "token",
    "api_key",
    "apikey",
    "api_token",
    "secret",
    "password",
    "CLICKUP_API_KEY",
    "GITHUB_TOKEN",
    "JIRA_API_TOKEN",
]

# Formats that are secrets wherever they appear
SECRET_REGEXES = [
    r"pk_[0-9]+_[A-Za-z0-9]{16,}",      # ClickUp personal tokens
    r"ghp_[A-Za-z0-9]{20,}",            # GitHub classic PATs
    r"github_pat_[A-Za-z0-9_]{20,}",    # GitHub fine-grained PATs
    r"sk-[A-Za-z0-9\-]{20,}",           # LLM provider keys
    r"ATATT[A-Za-z0-9\-_=]{20,}",       # Atlassian API tokens
]


def mask_secrets(text: str, mask: str = "********") -> str:
    """Mask secrets in a string.

    Args:
        text: The text that may contain secrets
        mask: The string to replace secrets with

    Returns:
        Text with secrets masked
    """
    if not text:
        return text

    result = text

    for pattern in SECRET_PATTERNS:
        regex = rf'({pattern}["\']?\s*[=:]\s*["\']?)([^"\'\s]+)(["\']?)'
        result = re.sub(regex, rf'\1{mask}\3', result, flags=re.IGNORECASE)

    for regex in SECRET_REGEXES:
        result = re.sub(regex, mask, result)

    return result


class SecretMaskingFormatter(logging.Formatter):
    """Formatter that masks secrets in log messages."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        return mask_secrets(message)


def _level_from_env() -> Optional[int]:
    name = os.environ.get("AIOS_LOG_LEVEL", "").upper()
    if name in ("DEBUG", "INFO", "WARNING", "ERROR"):
        return getattr(logging, name)
    return None


def setup_logging(
    level: Optional[int] = None,
    log_file: Optional[Path] = None,
    quiet: bool = False
) -> logging.Logger:
    """Set up logging configuration.

    Args:
        level: Logging level (default: AIOS_LOG_LEVEL, DEBUG if AIOS_DEBUG, else WARNING)
        log_file: Optional path to log file
        quiet: If True, suppress console output

    Returns:
        Configured logger
    """
    if level is None:
        level = _level_from_env()
    if level is None:
        level = logging.DEBUG if DEBUG_MODE else logging.WARNING

    logger = logging.getLogger("aios_core")
    logger.setLevel(level)

    # Clear existing handlers
    logger.handlers.clear()

    if not quiet:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)

        if DEBUG_MODE or level == logging.DEBUG:
            console_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        else:
            console_format = "%(message)s"

        console_handler.setFormatter(SecretMaskingFormatter(console_format))
        logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_format = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"
        file_handler.setFormatter(SecretMaskingFormatter(file_format))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "aios_core") -> logging.Logger:
    """Get a logger inside the AIOS hierarchy.

    Args:
        name: Logger name (will be prefixed with 'aios_core.')

    Returns:
        Logger instance
    """
    if not name.startswith("aios_core"):
        name = f"aios_core.{name}"
    return logging.getLogger(name)


# Environment variable documentation
ENV_VARS = {
    "AIOS_DEBUG": {
        "description": "Enable debug mode with verbose logging",
        "values": ["1", "true", "yes"],
        "default": "false"
    },
    "AIOS_LOG_LEVEL": {
        "description": "Set logging level",
        "values": ["DEBUG", "INFO", "WARNING", "ERROR"],
        "default": "WARNING"
    },
    "AIOS_PROJECT_ROOT": {
        "description": "Project root containing .aios-core/, common/ and expansion-packs/",
        "default": "nearest parent directory containing .aios-core/"
    }
}
