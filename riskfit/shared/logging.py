"""
Logging setup for processes that embed the risk core.

Every riskfit module logs through ``logging.getLogger(__name__)``; this
module only decides where those records go and how loud they are.
Logging must not change program behavior.
Never logs investor financial details beyond identifiers.
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DOMAIN_LOGGER = "riskfit.domain"
QUIET_LOGGERS = ("numpy",)


def _level(name: Optional[str], default: int = logging.INFO) -> int:
    if not name:
        return default
    return getattr(logging, name.upper(), default)


def configure_logging(level: str = "INFO", domain_level: Optional[str] = None) -> None:
    """Route riskfit log records to stdout.

    Args:
        level: Root log level string (DEBUG, INFO, WARNING, ERROR).
        domain_level: Separate level for the domain services, which log
            their computed aggregates at DEBUG. Follows ``level`` when omitted.
    """
    root_level = _level(level)
    logging.basicConfig(
        level=root_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    logging.getLogger(DOMAIN_LOGGER).setLevel(_level(domain_level, root_level))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
