from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import Response

from imgchain.application.dtos.common_dto import ErrorResponse
from imgchain.application.dtos.image_dto import DeleteSessionResponse, SessionResponse
from imgchain.application.use_cases.download_image import DownloadImageUseCase
from imgchain.application.use_cases.upload_image import UploadImageUseCase
from imgchain.domain.errors import DecodeFailureError, SessionNotFoundError
from imgchain.infrastructure.api.dependencies import (
    get_download_use_case,
    get_session_store,
    get_upload_use_case,
)
from imgchain.infrastructure.api.errors import to_http_error
from imgchain.infrastructure.storage.session_store import SessionStore

router = APIRouter(
    prefix="/sessions",
    tags=["Editing Sessions"],
    responses={
        404: {"model": ErrorResponse, "description": "Not Found - Session does not exist or has been evicted"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload Image",
    description="""
    Upload an image and open an editing session on it.

    **Supported formats**: anything Pillow decodes (PNG, JPEG, GIF, BMP, TIFF, WEBP)

    The uploaded image will be:
    - Decoded to grayscale (single channel files) or RGB (everything else)
    - Kept untouched as the session's original for every later render
    - Paired with an empty step history
    """,
    response_description="The new session with its image metadata",
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request - Not a decodable image"},
        413: {"model": ErrorResponse, "description": "Payload Too Large - File size exceeds limit"},
    },
)
async def upload_image(
    file: UploadFile = File(..., description="Image file to upload"),
    uc: UploadImageUseCase = Depends(get_upload_use_case),
):
    """Decode an uploaded image and open a session on it."""
    data = await file.read()
    try:
        session = uc.execute(data, file.filename or "upload")
    except DecodeFailureError as exc:
        raise to_http_error(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(exc)) from exc
    return SessionResponse.from_session(session)


@router.get(
    "/{session_id}",
    response_model=SessionResponse,
    summary="Get Session",
    description="Image metadata and undo/redo state of an editing session.",
)
async def get_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    try:
        session = store.get(session_id)
    except SessionNotFoundError as exc:
        raise to_http_error(exc) from exc
    return SessionResponse.from_session(session)


@router.delete(
    "/{session_id}",
    response_model=DeleteSessionResponse,
    summary="Close Session",
    description="Discard the session, its history and its final image.",
)
async def delete_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    if not store.delete(session_id):
        raise to_http_error(SessionNotFoundError(session_id))
    return {"ok": True}


@router.get(
    "/{session_id}/original",
    summary="Download Original",
    description="The untouched original image of the session, encoded as PNG.",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def get_original(
    session_id: str, uc: DownloadImageUseCase = Depends(get_download_use_case)
):
    try:
        encoded = uc.original(session_id)
    except SessionNotFoundError as exc:
        raise to_http_error(exc) from exc
    return Response(content=encoded.data, media_type=encoded.content_type)
