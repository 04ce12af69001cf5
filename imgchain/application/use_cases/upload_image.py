from __future__ import annotations

from dataclasses import dataclass

from imgchain.domain.entities.editing_session import EditingSession
from imgchain.domain.errors import DecodeFailureError
from imgchain.infrastructure.storage.image_codec import ImageCodec
from imgchain.infrastructure.storage.session_store import SessionStore


@dataclass
class UploadImageUseCase:
    store: SessionStore
    codec: ImageCodec
    max_upload_bytes: int | None = None

    def execute(self, data: bytes, original_filename: str | None = None) -> EditingSession:
        """
        Decode an uploaded file and open a new editing session on it.

        The new session starts with an empty history and no final image.

        Raises:
            DecodeFailureError: the bytes are not a decodable image.
            ValueError: the file is larger than ``max_upload_bytes``.
        """
        if self.max_upload_bytes is not None and len(data) > self.max_upload_bytes:
            raise ValueError(f"File exceeds {self.max_upload_bytes} bytes")
        decoded = self.codec.decode(data)
        if decoded.array.size == 0:
            raise DecodeFailureError("Image has no pixels")
        return self.store.create(
            decoded.array,
            mime_type=decoded.mime_type,
            original_filename=original_filename,
            file_size=decoded.size,
        )
