# src/check_certs/config.py

import logging
import sys
from dataclasses import dataclass
from typing import Optional

import coloredlogs

LOGGER_NAME = "check_certs"
DEFAULT_TIMEOUT = 3  # seconds, connect + handshake


@dataclass(frozen=True)
class CheckConfig:
    """
    Settings for one batch of certificate checks.

    Attributes:
        insecure: Accept any server identity during the handshake.
        utc: Render validity timestamps in UTC instead of local time.
        timeout: Connect and handshake timeout in seconds.
        template: Jinja2 text replacing the default plain text layout.
    """
    insecure: bool = False
    utc: bool = False
    timeout: float = DEFAULT_TIMEOUT
    template: Optional[str] = None

    @classmethod
    def from_args(cls, args, template: Optional[str] = None) -> "CheckConfig":
        """Build a config from parsed command line arguments."""
        return cls(
            insecure=getattr(args, 'insecure', False),
            utc=getattr(args, 'utc', False),
            timeout=getattr(args, 'timeout', DEFAULT_TIMEOUT),
            template=template,
        )


def get_log_level(level_name: Optional[str]) -> int:
    """Map a level name such as 'DEBUG' to its logging constant (WARNING if unknown)."""
    if not level_name:
        return logging.WARNING
    level = getattr(logging, level_name.upper(), None)
    return level if isinstance(level, int) else logging.WARNING


def setup_logging(level_name: Optional[str], fmt: Optional[str] = None) -> logging.Logger:
    """
    Configure the 'check_certs' logger.

    Colored output via coloredlogs when stderr is a terminal, a plain
    formatter otherwise. File and line are added to the format at DEBUG.
    """
    loglevel = get_log_level(level_name)
    if fmt is None:
        fmt = ('%(asctime)s [%(levelname)-8s] %(name)s: %(message)s' if loglevel > logging.DEBUG
               else '%(asctime)s [%(levelname)-8s] %(name)s (%(filename)s:%(lineno)d): %(message)s')

    logger = logging.getLogger(LOGGER_NAME)
    logger.propagate = False
    if hasattr(sys.stderr, 'isatty') and sys.stderr.isatty():
        coloredlogs.install(level=loglevel, logger=logger, fmt=fmt, stream=sys.stderr)
    elif not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)
    logger.setLevel(loglevel)
    return logger
