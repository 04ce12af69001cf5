from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response

from imgchain.application.dtos.common_dto import ErrorResponse, OperationInfo, OperationsResponse
from imgchain.application.dtos.image_dto import ResultResponse
from imgchain.application.use_cases.download_image import DownloadImageUseCase
from imgchain.domain.errors import SessionNotFoundError
from imgchain.domain.services.operation_catalog import list_operations
from imgchain.infrastructure.api.dependencies import (
    get_download_use_case,
    get_session_store,
    get_settings,
)
from imgchain.infrastructure.api.errors import to_http_error
from imgchain.infrastructure.config import Settings
from imgchain.infrastructure.storage.session_store import SessionStore

router = APIRouter(
    tags=["Image Processing"],
    responses={
        404: {"model": ErrorResponse, "description": "Not Found - Session does not exist or has no final image"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


@router.get(
    "/operations",
    response_model=OperationsResponse,
    summary="List Operations",
    description="""
    The fifteen supported operations with the parameters each one reads,
    their defaults and suggested form ranges.
    """,
)
async def get_operations():
    return OperationsResponse(operations=[OperationInfo.from_spec(s) for s in list_operations()])


@router.get(
    "/sessions/{session_id}/result",
    response_model=ResultResponse,
    summary="Get Final Image Metadata",
    description="Metadata of the latest completed render. 404 while no final image exists.",
)
async def get_result(session_id: str, store: SessionStore = Depends(get_session_store)):
    try:
        session = store.get(session_id)
    except SessionNotFoundError as exc:
        raise to_http_error(exc) from exc
    if not session.has_result:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No processed image yet")
    return ResultResponse.from_session(session)


@router.get(
    "/sessions/{session_id}/download",
    summary="Download Processed Image",
    description="""
    The final image as an attachment named `processed_image.<ext>`.

    **Formats**: `png` (default), `jpg`
    """,
    response_class=Response,
    responses={200: {"content": {"image/png": {}, "image/jpeg": {}}}},
)
async def download(
    session_id: str,
    ext: str | None = Query(None, pattern="^(png|jpg|jpeg)$", description="Output format"),
    uc: DownloadImageUseCase = Depends(get_download_use_case),
    settings: Settings = Depends(get_settings),
):
    try:
        encoded = uc.execute(session_id, ext or settings.default_ext)
    except SessionNotFoundError as exc:
        raise to_http_error(exc) from exc
    if encoded is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No processed image yet")
    return Response(
        content=encoded.data,
        media_type=encoded.content_type,
        headers={"Content-Disposition": f'attachment; filename="{encoded.filename}"'},
    )
