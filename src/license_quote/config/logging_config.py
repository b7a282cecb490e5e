"""Logging setup for the API and UI entry points."""
import logging
import sys
from typing import Optional

from .settings import get_settings

_configured = False


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once; later calls only adjust the level."""
    global _configured
    level = level or get_settings().log_level
    
    if not _configured:
        logging.basicConfig(
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            stream=sys.stdout,
            level=level,
        )
        _configured = True
    else:
        logging.getLogger().setLevel(level)
