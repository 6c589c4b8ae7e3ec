# formdoc/logger.py
from __future__ import annotations
import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

def get_logger(name: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """Module logger; configures the root handler the first time it is asked for."""
    if not logging.getLogger().handlers:
        logging.basicConfig(level=(level or "INFO").upper(), format=LOG_FORMAT)
    elif level:
        logging.getLogger().setLevel(level.upper())
    return logging.getLogger(name)
