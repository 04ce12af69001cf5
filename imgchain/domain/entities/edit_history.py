from __future__ import annotations

from dataclasses import dataclass

from imgchain.domain.entities.processing_step import ProcessingStep


@dataclass(frozen=True)
class EditHistory:
    """Linear undo/redo history over processing steps.

    ``past`` holds applied steps oldest first, ``future`` holds undone steps
    with the next one to redo first. Every transition returns a new history.
    ``present`` is kept for API shape only; no transition assigns it.
    """

    past: tuple[ProcessingStep, ...] = ()
    future: tuple[ProcessingStep, ...] = ()
    present: ProcessingStep | None = None

    @classmethod
    def empty(cls) -> EditHistory:
        return cls()

    def reset(self) -> EditHistory:
        return EditHistory.empty()

    def add_step(self, step: ProcessingStep) -> EditHistory:
        # adding a step prunes every redoable step
        return EditHistory(past=self.past + (step,), future=())

    def undo(self) -> EditHistory:
        if not self.past:
            return self
        return EditHistory(past=self.past[:-1], future=(self.past[-1],) + self.future)

    def redo(self) -> EditHistory:
        if not self.future:
            return self
        return EditHistory(past=self.past + (self.future[0],), future=self.future[1:])

    @property
    def can_undo(self) -> bool:
        return bool(self.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.future)
