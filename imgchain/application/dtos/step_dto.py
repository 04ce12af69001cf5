from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from imgchain.domain.entities.editing_session import EditingSession
from imgchain.domain.entities.processing_step import ProcessingParams, ProcessingStep


class ProcessingParamsModel(BaseModel):
    """Parameter snapshot. Omitted fields take the editor defaults."""
    clip_limit: Optional[float] = Field(None, description="CLAHE clip limit", example=2.0)
    tile_size: Optional[int] = Field(None, description="CLAHE square tile size", example=8)
    threshold1: Optional[float] = Field(None, description="Canny low threshold", example=50)
    threshold2: Optional[float] = Field(None, description="Canny high threshold", example=150)
    sigma: Optional[float] = Field(None, description="Unsharp mask blur sigma", example=3)
    amount: Optional[float] = Field(None, description="Unsharp mask strength", example=1.5)
    kernel_size: Optional[int] = Field(None, description="High-pass / Laplacian kernel size (odd)", example=3)
    scale: Optional[float] = Field(None, description="Laplacian scale factor", example=1)
    threshold: Optional[float] = Field(None, description="Binary threshold cutoff (0-255)", example=127)
    color_map: Optional[int] = Field(None, description="OpenCV colormap id (0-21)", example=2)
    boost_factor: Optional[list[float]] = Field(None, description="R, G, B gains", example=[1, 1, 1])
    mix_factors: Optional[list[list[float]]] = Field(
        None,
        description="3x3 mixing matrix; row i produces output channel i",
        example=[[1, 0, 0], [0, 1, 0], [0, 0, 1]],
    )
    color_tint: Optional[list[float]] = Field(None, description="R, G, B tint", example=[128, 128, 128])
    retinex_scales: Optional[list[float]] = Field(None, description="Retinex blur scales", example=[15, 80, 250])
    gabor_kernel_size: Optional[int] = Field(None, description="Gabor kernel size (odd, >= 3)", example=31)
    gabor_sigma: Optional[float] = Field(None, description="Gabor envelope sigma", example=5)
    gabor_theta: Optional[float] = Field(None, description="Gabor orientation (radians)", example=0)
    gabor_lambda: Optional[float] = Field(None, description="Gabor wavelength", example=10)
    gabor_gamma: Optional[float] = Field(None, description="Gabor aspect ratio", example=0.5)
    gabor_psi: Optional[float] = Field(None, description="Gabor phase offset", example=0)

    def to_domain(self) -> ProcessingParams:
        return ProcessingParams.from_dict(self.model_dump(exclude_none=True))


class AddStepRequest(BaseModel):
    """Request model for appending a processing step."""
    operation: str = Field(..., description="Operation identifier (label or enum name)", example="Thresholding")
    params: ProcessingParamsModel = Field(
        default_factory=ProcessingParamsModel, description="Parameter snapshot for the step"
    )


class StepItem(BaseModel):
    """A step as stored in history, with only the parameters its operation reads."""
    operation: str = Field(..., description="Operation identifier", example="Thresholding")
    params: dict[str, Any] = Field(..., description="Parameters used by the operation", example={"threshold": 127})

    @classmethod
    def from_entity(cls, step: ProcessingStep) -> StepItem:
        return cls(operation=step.operation.value, params=step.relevant_params())


class HistoryResponse(BaseModel):
    """Undo/redo state of a session."""
    session_id: str = Field(..., description="Editing session ID")
    past: list[StepItem] = Field(..., description="Applied steps, oldest first")
    present: Optional[StepItem] = Field(None, description="Reserved; always null")
    future: list[StepItem] = Field(..., description="Undone steps, next redo first")
    can_undo: bool = Field(..., description="Whether undo would change the history")
    can_redo: bool = Field(..., description="Whether redo would change the history")
    has_result: bool = Field(..., description="Whether a final image is available")
    generation: int = Field(..., description="Number of renders started for this session")
    last_error: Optional[str] = Field(None, description="Error of the latest render, if it failed")

    @classmethod
    def from_session(cls, session: EditingSession) -> HistoryResponse:
        history = session.history
        return cls(
            session_id=session.id,
            past=[StepItem.from_entity(s) for s in history.past],
            present=None,
            future=[StepItem.from_entity(s) for s in history.future],
            can_undo=history.can_undo,
            can_redo=history.can_redo,
            has_result=session.has_result,
            generation=session.generation,
            last_error=session.last_error,
        )
