from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

import numpy as np

from imgchain.domain.entities.edit_history import EditHistory
from imgchain.domain.entities.image import ImageEntity


@dataclass
class EditingSession:
    """One loaded original image, its step history and the last rendered result.

    Every render is tagged with a generation number. Only the newest
    generation may publish a result, so a slow run that finishes after a
    newer one cannot overwrite it.
    """

    id: str
    image: ImageEntity
    original: np.ndarray
    created_at: datetime
    history: EditHistory = field(default_factory=EditHistory.empty)
    final_image: np.ndarray | None = None
    generation: int = 0
    last_error: str | None = None

    def begin_run(self) -> int:
        self.generation += 1
        return self.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def publish(self, generation: int, image: np.ndarray | None) -> bool:
        if not self.is_current(generation):
            return False
        self.final_image = image
        self.last_error = None
        return True

    def fail(self, generation: int, error: str) -> bool:
        # a failed run never leaves a partial or outdated result visible
        if not self.is_current(generation):
            return False
        self.final_image = None
        self.last_error = error
        return True

    def reset_history(self) -> None:
        self.history = self.history.reset()
        self.final_image = None
        self.last_error = None
        self.generation += 1

    @property
    def has_result(self) -> bool:
        return self.final_image is not None
