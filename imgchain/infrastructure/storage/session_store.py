from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from datetime import UTC, datetime

import numpy as np

from imgchain.domain.entities.editing_session import EditingSession
from imgchain.domain.entities.image import ImageEntity
from imgchain.domain.errors import SessionNotFoundError

logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory editing sessions, oldest evicted first once ``max_sessions`` is reached.

    Nothing is persisted; a restart drops every session.
    """

    def __init__(self, max_sessions: int = 64) -> None:
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, EditingSession] = OrderedDict()

    def create(
        self,
        original: np.ndarray,
        mime_type: str,
        original_filename: str | None = None,
        file_size: int | None = None,
    ) -> EditingSession:
        now = datetime.now(UTC)
        height, width = original.shape[:2]
        channels = 1 if original.ndim == 2 else int(original.shape[2])
        image = ImageEntity(
            id=f"img_{uuid.uuid4().hex[:12]}",
            width=width,
            height=height,
            channels=channels,
            mime_type=mime_type,
            created_at=now,
            original_filename=original_filename,
            file_size=file_size,
        )
        # the original is read-only for the whole session
        frozen = original.copy()
        frozen.setflags(write=False)
        session = EditingSession(
            id=f"ses_{uuid.uuid4().hex[:12]}", image=image, original=frozen, created_at=now
        )
        self._sessions[session.id] = session
        while len(self._sessions) > self.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info("Evicted session %s", evicted)
        return session

    def get(self, session_id: str) -> EditingSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        self._sessions.move_to_end(session_id)
        return session

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
