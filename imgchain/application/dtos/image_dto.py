from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from imgchain.application.dtos.step_dto import HistoryResponse
from imgchain.domain.entities.editing_session import EditingSession
from imgchain.domain.entities.image import ImageEntity


class ImageMetadata(BaseModel):
    """Metadata of the original image loaded into a session."""
    id: str = Field(..., description="Unique identifier of the image", example="img_3f2a9c1b7d4e")
    width: int = Field(..., description="Width of the image in pixels", example=1920, gt=0)
    height: int = Field(..., description="Height of the image in pixels", example=1080, gt=0)
    channels: int = Field(..., description="1 for grayscale, 3 for RGB", example=3)
    mime_type: str = Field(..., description="MIME type of the uploaded file", example="image/png")
    created_at: datetime = Field(..., description="ISO timestamp when the image was uploaded")
    original_filename: Optional[str] = Field(None, description="Original filename when uploaded", example="photo.jpg")
    file_size: Optional[int] = Field(None, description="Size of the uploaded file in bytes", example=2048576)

    @classmethod
    def from_entity(cls, image: ImageEntity) -> ImageMetadata:
        return cls(
            id=image.id,
            width=image.width,
            height=image.height,
            channels=image.channels,
            mime_type=image.mime_type,
            created_at=image.created_at,
            original_filename=image.original_filename,
            file_size=image.file_size,
        )


class SessionResponse(BaseModel):
    """An editing session: its original image and history state."""
    id: str = Field(..., description="Editing session ID", example="ses_9b1e6a0c2f7d")
    image: ImageMetadata = Field(..., description="Metadata of the original image")
    history: HistoryResponse = Field(..., description="Undo/redo state")
    created_at: datetime = Field(..., description="ISO timestamp when the session was opened")

    @classmethod
    def from_session(cls, session: EditingSession) -> SessionResponse:
        return cls(
            id=session.id,
            image=ImageMetadata.from_entity(session.image),
            history=HistoryResponse.from_session(session),
            created_at=session.created_at,
        )


class ResultResponse(BaseModel):
    """Metadata of the final image of the latest completed render."""
    session_id: str = Field(..., description="Editing session ID")
    width: int = Field(..., description="Width of the final image in pixels", example=800)
    height: int = Field(..., description="Height of the final image in pixels", example=600)
    channels: int = Field(..., description="1 for grayscale, 3 for RGB", example=1)
    step_count: int = Field(..., description="Number of applied steps", example=2)
    generation: int = Field(..., description="Render generation that produced the image")
    download_url: str = Field(..., description="Relative URL of the encoded image")

    @classmethod
    def from_session(cls, session: EditingSession) -> ResultResponse:
        final = session.final_image
        if final is None:
            raise ValueError(f"Session {session.id} has no final image")
        return cls(
            session_id=session.id,
            width=int(final.shape[1]),
            height=int(final.shape[0]),
            channels=1 if final.ndim == 2 else int(final.shape[2]),
            step_count=len(session.history.past),
            generation=session.generation,
            download_url=f"/sessions/{session.id}/download",
        )


class DeleteSessionResponse(BaseModel):
    """Response model for session deletion."""
    ok: bool = Field(True, description="Indicates whether the deletion was successful")
