import logging

from reservations.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    lvl = (level or settings.LOG_LEVEL or "INFO").upper()
    logging.basicConfig(level=lvl, format=LOG_FORMAT)
    logging.getLogger("reservations").setLevel(lvl)
