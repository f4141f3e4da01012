from __future__ import annotations

from .base import Base
from . import models  # noqa: F401  (registers tables)
from . import session as db_session


def init_db() -> None:
    Base.metadata.create_all(bind=db_session.engine)
