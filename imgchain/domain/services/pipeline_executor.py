from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

import cv2
import numpy as np

from imgchain.domain.entities.processing_step import ProcessingStep
from imgchain.domain.errors import CapabilityUnavailableError, ProcessingError, StepFailedError
from imgchain.domain.services.operation_catalog import apply_operation

logger = logging.getLogger(__name__)


class TransformCapability(Protocol):
    @property
    def is_ready(self) -> bool: ...

    async def wait_ready(self, timeout: float | None = None) -> None: ...


class PipelineExecutor:
    """Replays a step list over an original image.

    Every call is a cold replay from the original: no intermediate result is
    kept between runs, so the output depends only on ``original`` and the
    ordered ``steps``.
    """

    def __init__(self, capability: TransformCapability) -> None:
        self.capability = capability

    def run(self, original: np.ndarray, steps: Sequence[ProcessingStep]) -> np.ndarray:
        """
        Apply ``steps`` in order to a working copy of ``original``.

        Raises:
            CapabilityUnavailableError: the transform library is not loaded; nothing is touched.
            UnsupportedOperationError, InvalidParameterError: raised by the offending step.
            StepFailedError: the transform library rejected a step.
        """
        if not self.capability.is_ready:
            raise CapabilityUnavailableError("Image transform capability is not ready")

        working = original.copy()
        for index, step in enumerate(steps):
            try:
                result = apply_operation(step.operation, working, step.params)
            except ProcessingError:
                logger.warning("Replay aborted at step %d (%s)", index + 1, step.operation.value)
                raise
            except (cv2.error, ValueError, TypeError) as exc:
                logger.warning("Replay aborted at step %d (%s): %s", index + 1, step.operation.value, exc)
                raise StepFailedError(index, step.operation.value, str(exc)) from exc
            # the previous working buffer is released here; only the newest is owned
            working = result
            logger.debug(
                "Step %d/%d %s -> shape=%s", index + 1, len(steps), step.operation.value, working.shape
            )
        return working
