from __future__ import annotations

from dataclasses import dataclass

from imgchain.infrastructure.storage.image_codec import EncodedImage, ImageCodec
from imgchain.infrastructure.storage.session_store import SessionStore


@dataclass
class DownloadImageUseCase:
    store: SessionStore
    codec: ImageCodec

    def execute(self, session_id: str, ext: str = "png") -> EncodedImage | None:
        """Encode the session's final image as ``processed_image.<ext>``; None while there is none."""
        session = self.store.get(session_id)
        if session.final_image is None:
            return None
        return self.codec.encode(session.final_image, ext)

    def original(self, session_id: str, ext: str = "png") -> EncodedImage:
        session = self.store.get(session_id)
        return self.codec.encode(session.original, ext)
