from __future__ import annotations

import logging
from dataclasses import dataclass

from imgchain.domain.entities.editing_session import EditingSession
from imgchain.domain.errors import ProcessingError
from imgchain.domain.services.pipeline_executor import PipelineExecutor, TransformCapability

logger = logging.getLogger(__name__)


@dataclass
class RenderImageUseCase:
    """
    Recompute a session's final image from its original and current steps.

    WORKFLOW:
    1. Tag the run with the session's next generation number
    2. Snapshot the applied steps (``history.past``) at trigger time
    3. Wait for the image transform capability (the only suspension point)
    4. Replay the whole chain from the original without further suspension
    5. Publish the result only if no newer run was started meanwhile

    An empty step list publishes no final image. Any failed replay, including
    unexpected errors, clears the final image and re-raises; partial results
    are never published.
    """

    executor: PipelineExecutor
    capability: TransformCapability
    timeout: float | None = 10.0

    async def execute(self, session: EditingSession) -> bool:
        """
        Returns:
            True if this run's result was published, False if it was superseded.

        Raises:
            ProcessingError: capability unavailable or a step failed (for the current run).
        """
        generation = session.begin_run()
        steps = session.history.past
        original = session.original

        if not steps:
            session.publish(generation, None)
            return True

        logger.debug("Render %s gen=%d queued with %d steps", session.id, generation, len(steps))
        try:
            await self.capability.wait_ready(self.timeout)
            result = self.executor.run(original, steps)
        except ProcessingError as exc:
            if not session.fail(generation, str(exc)):
                logger.info("Stale render %s gen=%d failed: %s", session.id, generation, exc)
                return False
            raise
        except Exception as exc:
            # the new chain has no image; the previous result must not stay visible
            session.fail(generation, f"{type(exc).__name__}: {exc}")
            logger.exception("Render %s gen=%d crashed", session.id, generation)
            raise

        if not session.publish(generation, result):
            logger.warning(
                "Discarding stale render %s gen=%d (latest=%d)",
                session.id,
                generation,
                session.generation,
            )
            return False
        logger.info(
            "Rendered %s gen=%d: %d steps -> %dx%d",
            session.id,
            generation,
            len(steps),
            result.shape[1],
            result.shape[0],
        )
        return True
