"""Create all tables. Run on app startup."""
import logging

from pharmacare.db.base import Base
from pharmacare.db.session import engine
from pharmacare import models  # noqa: F401 - register models

logger = logging.getLogger(__name__)


def init_db(bind=None):
    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    logger.info("Database tables ensured on %s", bind.url.render_as_string(hide_password=True))
