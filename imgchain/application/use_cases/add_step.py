from __future__ import annotations

import logging
from dataclasses import dataclass

from imgchain.application.use_cases.render_image import RenderImageUseCase
from imgchain.domain.entities.editing_session import EditingSession
from imgchain.domain.entities.processing_step import OperationId, ProcessingParams, ProcessingStep
from imgchain.domain.services.operation_catalog import validate_step
from imgchain.infrastructure.storage.session_store import SessionStore

logger = logging.getLogger(__name__)


@dataclass
class AddStepUseCase:
    store: SessionStore
    render: RenderImageUseCase

    async def execute(
        self, session_id: str, operation: OperationId | str, params: ProcessingParams
    ) -> EditingSession:
        """
        Append a step and re-render.

        The parameters are validated against the operation before the history
        changes, so a rejected step never enters ``past``. Appending discards
        every redoable step.

        Raises:
            SessionNotFoundError: unknown session.
            UnsupportedOperationError, InvalidParameterError: rejected step, history untouched.
            ProcessingError: the re-render failed; the step stays in history.
        """
        session = self.store.get(session_id)
        spec = validate_step(operation, params)
        step = ProcessingStep(operation=spec.id, params=params)
        dropped = len(session.history.future)
        session.history = session.history.add_step(step)
        if dropped:
            logger.info("Session %s: add_step pruned %d redoable steps", session.id, dropped)
        await self.render.execute(session)
        return session
