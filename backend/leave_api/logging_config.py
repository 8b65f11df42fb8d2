from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from leave_api.config import Settings

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_configured = False


def configure_logging(settings: Settings) -> None:
    """Configure root logging once per process."""
    global _configured
    if _configured:
        return
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
    if not settings.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _configured = True
