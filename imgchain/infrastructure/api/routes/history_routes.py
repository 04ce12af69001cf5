from __future__ import annotations

from fastapi import APIRouter, Depends

from imgchain.application.dtos.common_dto import ErrorResponse
from imgchain.application.dtos.step_dto import AddStepRequest, HistoryResponse
from imgchain.application.use_cases.add_step import AddStepUseCase
from imgchain.application.use_cases.navigate_history import (
    RedoStepUseCase,
    ResetHistoryUseCase,
    UndoStepUseCase,
)
from imgchain.domain.errors import ProcessingError, SessionNotFoundError
from imgchain.infrastructure.api.dependencies import (
    get_add_step_use_case,
    get_redo_use_case,
    get_reset_use_case,
    get_session_store,
    get_undo_use_case,
)
from imgchain.infrastructure.api.errors import to_http_error
from imgchain.infrastructure.storage.session_store import SessionStore

router = APIRouter(
    prefix="/sessions/{session_id}/history",
    tags=["Step History"],
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request - Unsupported operation or invalid parameter"},
        404: {"model": ErrorResponse, "description": "Not Found - Session does not exist"},
        503: {"model": ErrorResponse, "description": "Service Unavailable - Image transform capability not ready"},
    },
)


@router.get(
    "",
    response_model=HistoryResponse,
    summary="Get Step History",
    description="""
    Applied (`past`) and undone (`future`) steps of a session.

    Each step lists only the parameters its operation reads. `present` is
    reserved and always null.
    """,
)
async def get_history(session_id: str, store: SessionStore = Depends(get_session_store)):
    try:
        session = store.get(session_id)
    except SessionNotFoundError as exc:
        raise to_http_error(exc) from exc
    return HistoryResponse.from_session(session)


@router.post(
    "/steps",
    response_model=HistoryResponse,
    summary="Add Processing Step",
    description="""
    Append a step and re-render the whole chain from the original image.

    **Behavior:**
    - Parameters are validated before the history changes
    - Missing parameters take the editor defaults
    - Every undone step is discarded (no redo after a new step)

    **Example Request:**
    ```json
    {"operation": "Thresholding", "params": {"threshold": 127}}
    ```
    """,
)
async def add_step(
    session_id: str,
    body: AddStepRequest,
    uc: AddStepUseCase = Depends(get_add_step_use_case),
):
    try:
        session = await uc.execute(session_id, body.operation, body.params.to_domain())
    except (SessionNotFoundError, ProcessingError) as exc:
        raise to_http_error(exc) from exc
    return HistoryResponse.from_session(session)


@router.post(
    "/undo",
    response_model=HistoryResponse,
    summary="Undo Last Step",
    description="Move the last applied step to the redo list and re-render. No-op when nothing was applied.",
)
async def undo(session_id: str, uc: UndoStepUseCase = Depends(get_undo_use_case)):
    try:
        session = await uc.execute(session_id)
    except (SessionNotFoundError, ProcessingError) as exc:
        raise to_http_error(exc) from exc
    return HistoryResponse.from_session(session)


@router.post(
    "/redo",
    response_model=HistoryResponse,
    summary="Redo Step",
    description="Re-apply the next undone step and re-render. No-op when there is nothing to redo.",
)
async def redo(session_id: str, uc: RedoStepUseCase = Depends(get_redo_use_case)):
    try:
        session = await uc.execute(session_id)
    except (SessionNotFoundError, ProcessingError) as exc:
        raise to_http_error(exc) from exc
    return HistoryResponse.from_session(session)


@router.post(
    "/reset",
    response_model=HistoryResponse,
    summary="Reset History",
    description="Drop every applied and undone step and the final image.",
)
async def reset(session_id: str, uc: ResetHistoryUseCase = Depends(get_reset_use_case)):
    try:
        session = uc.execute(session_id)
    except SessionNotFoundError as exc:
        raise to_http_error(exc) from exc
    return HistoryResponse.from_session(session)
