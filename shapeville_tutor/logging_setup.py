from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "SHAPEVILLE_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


def configure_logging(level: str | None = None) -> None:
    """Initialise stdlib logging for the app.

    ``level`` defaults to ``$SHAPEVILLE_LOG_LEVEL`` and then WARNING. Unknown
    level names fall back to WARNING rather than failing start-up.
    """

    name = (level or os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).strip().upper()
    resolved = getattr(logging, name, None)
    if not isinstance(resolved, int):
        resolved = logging.WARNING
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
