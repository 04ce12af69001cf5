from __future__ import annotations

from imgchain.application.use_cases.add_step import AddStepUseCase
from imgchain.application.use_cases.download_image import DownloadImageUseCase
from imgchain.application.use_cases.navigate_history import (
    RedoStepUseCase,
    ResetHistoryUseCase,
    UndoStepUseCase,
)
from imgchain.application.use_cases.render_image import RenderImageUseCase
from imgchain.application.use_cases.upload_image import UploadImageUseCase
from imgchain.domain.services.pipeline_executor import PipelineExecutor
from imgchain.infrastructure.capability.opencv_capability import OpenCVCapability
from imgchain.infrastructure.config import Settings
from imgchain.infrastructure.storage.image_codec import ImageCodec
from imgchain.infrastructure.storage.session_store import SessionStore

# Process-wide singletons, created lazily
_SETTINGS: Settings | None = None
_CAPABILITY: OpenCVCapability | None = None
_STORE: SessionStore | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS


def get_capability() -> OpenCVCapability:
    global _CAPABILITY
    if _CAPABILITY is None:
        _CAPABILITY = OpenCVCapability()
    return _CAPABILITY


def get_session_store() -> SessionStore:
    global _STORE
    if _STORE is None:
        _STORE = SessionStore(max_sessions=get_settings().max_sessions)
    return _STORE


def get_codec() -> ImageCodec:
    return ImageCodec()


def get_render_use_case() -> RenderImageUseCase:
    capability = get_capability()
    return RenderImageUseCase(
        executor=PipelineExecutor(capability),
        capability=capability,
        timeout=get_settings().capability_timeout,
    )


def get_upload_use_case() -> UploadImageUseCase:
    return UploadImageUseCase(
        store=get_session_store(),
        codec=get_codec(),
        max_upload_bytes=get_settings().max_upload_bytes,
    )


def get_add_step_use_case() -> AddStepUseCase:
    return AddStepUseCase(store=get_session_store(), render=get_render_use_case())


def get_undo_use_case() -> UndoStepUseCase:
    return UndoStepUseCase(store=get_session_store(), render=get_render_use_case())


def get_redo_use_case() -> RedoStepUseCase:
    return RedoStepUseCase(store=get_session_store(), render=get_render_use_case())


def get_reset_use_case() -> ResetHistoryUseCase:
    return ResetHistoryUseCase(store=get_session_store())


def get_download_use_case() -> DownloadImageUseCase:
    return DownloadImageUseCase(store=get_session_store(), codec=get_codec())
