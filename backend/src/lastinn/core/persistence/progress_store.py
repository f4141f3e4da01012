from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import lastinn.db.session as db_session
from lastinn.core.engine.state import PersistentProgress
from lastinn.core.persistence.state_codec import progress_from_dict, progress_to_dict
from lastinn.db.models import ProgressRecord

logger = logging.getLogger(__name__)

PROGRESS_NAMESPACE = "thelastinn-progress"


class ProgressStore(Protocol):
    def load(self) -> PersistentProgress: ...

    def save(self, progress: PersistentProgress) -> None: ...


class SqlProgressStore:
    """
    Keeps PersistentProgress as one JSON row per namespace.

    Storage failures never reach the game: load() falls back to empty
    progress and save() drops the write.
    """

    def __init__(
        self,
        session_factory: Optional[Callable[[], Session]] = None,
        namespace: str = PROGRESS_NAMESPACE,
    ):
        self._session_factory = session_factory
        self.namespace = namespace

    def _session(self) -> Session:
        # resolved lazily so a patched SessionLocal is picked up
        factory = self._session_factory or db_session.SessionLocal
        return factory()

    def load(self) -> PersistentProgress:
        try:
            with self._session() as db:
                row = db.get(ProgressRecord, self.namespace)
                data = row.data_json if row is not None else None
        except (SQLAlchemyError, ValueError) as e:
            # unreachable database or a row that is not valid JSON
            logger.warning("Could not load progress %r: %s", self.namespace, e)
            return PersistentProgress()

        if data is None:
            return PersistentProgress()
        if not isinstance(data, dict):
            logger.warning(
                "Ignoring malformed progress %r: %s",
                self.namespace,
                type(data).__name__,
            )
        return progress_from_dict(data)

    def save(self, progress: PersistentProgress) -> None:
        payload = progress_to_dict(progress)
        try:
            with self._session() as db:
                row = db.get(ProgressRecord, self.namespace)
                if row is None:
                    row = ProgressRecord(namespace=self.namespace, data_json=payload)
                else:
                    row.data_json = payload
                db.add(row)
                db.commit()
        except SQLAlchemyError as e:
            logger.warning("Could not save progress %r: %s", self.namespace, e)
