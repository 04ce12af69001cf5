from __future__ import annotations

from dataclasses import dataclass

from imgchain.application.use_cases.render_image import RenderImageUseCase
from imgchain.domain.entities.editing_session import EditingSession
from imgchain.infrastructure.storage.session_store import SessionStore


@dataclass
class UndoStepUseCase:
    store: SessionStore
    render: RenderImageUseCase

    async def execute(self, session_id: str) -> EditingSession:
        """Move the last applied step to the front of ``future``; no-op when nothing was applied."""
        session = self.store.get(session_id)
        if not session.history.can_undo:
            return session
        session.history = session.history.undo()
        await self.render.execute(session)
        return session


@dataclass
class RedoStepUseCase:
    store: SessionStore
    render: RenderImageUseCase

    async def execute(self, session_id: str) -> EditingSession:
        """Re-apply the next undone step; no-op when there is nothing to redo."""
        session = self.store.get(session_id)
        if not session.history.can_redo:
            return session
        session.history = session.history.redo()
        await self.render.execute(session)
        return session


@dataclass
class ResetHistoryUseCase:
    store: SessionStore

    def execute(self, session_id: str) -> EditingSession:
        """Drop every step (applied and undone) and the final image."""
        session = self.store.get(session_id)
        session.reset_history()
        return session
