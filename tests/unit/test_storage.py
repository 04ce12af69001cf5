"""
Tests for the image codec and the in-memory session store.
"""
from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from imgchain.domain.errors import DecodeFailureError, SessionNotFoundError
from imgchain.infrastructure.storage.image_codec import ImageCodec
from imgchain.infrastructure.storage.session_store import SessionStore


def encode_with_pillow(img: Image.Image, fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


class TestImageCodec:
    """Test decoding uploads and encoding downloads."""

    def test_decode_rgb_png(self, rgb_image):
        decoded = ImageCodec().decode(encode_with_pillow(Image.fromarray(rgb_image)))
        assert decoded.array.shape == (24, 32, 3)
        assert decoded.array.dtype == np.uint8
        assert decoded.mime_type == "image/png"
        assert np.array_equal(decoded.array, rgb_image)

    def test_decode_grayscale_stays_single_channel(self, gray_ramp):
        decoded = ImageCodec().decode(encode_with_pillow(Image.fromarray(gray_ramp)))
        assert decoded.array.shape == (16, 16)
        assert np.array_equal(decoded.array, gray_ramp)

    def test_decode_drops_alpha(self):
        rgba = np.zeros((4, 4, 4), dtype=np.uint8)
        rgba[..., 0] = 200
        rgba[..., 3] = 10
        decoded = ImageCodec().decode(encode_with_pillow(Image.fromarray(rgba)))
        assert decoded.array.shape == (4, 4, 3)
        assert decoded.array[0, 0].tolist() == [200, 0, 0]

    def test_decode_jpeg_reports_mime(self, rgb_image):
        decoded = ImageCodec().decode(encode_with_pillow(Image.fromarray(rgb_image), "JPEG"))
        assert decoded.mime_type == "image/jpeg"
        assert decoded.array.shape == rgb_image.shape

    @pytest.mark.parametrize("data", [b"", b"not an image", b"\x89PNG\r\n\x1a\n truncated"])
    def test_decode_rejects_invalid_bytes(self, data):
        with pytest.raises(DecodeFailureError):
            ImageCodec().decode(data)

    def test_encode_png_is_lossless(self, rgb_image):
        encoded = ImageCodec().encode(rgb_image, "png")
        assert encoded.content_type == "image/png"
        assert encoded.filename == "processed_image.png"
        assert np.array_equal(np.asarray(Image.open(io.BytesIO(encoded.data))), rgb_image)

    def test_encode_jpeg(self, gray_ramp):
        encoded = ImageCodec().encode(gray_ramp, ".JPG")
        assert encoded.content_type == "image/jpeg"
        assert encoded.filename == "processed_image.jpg"
        assert Image.open(io.BytesIO(encoded.data)).format == "JPEG"

    def test_encode_rejects_unknown_format(self, gray_ramp):
        with pytest.raises(ValueError):
            ImageCodec().encode(gray_ramp, "gif")


class TestSessionStore:
    """Test session lifecycle and eviction."""

    def test_create_and_get(self, rgb_image):
        store = SessionStore()
        session = store.create(rgb_image, mime_type="image/png", original_filename="a.png", file_size=42)

        assert store.get(session.id) is session
        assert session.id.startswith("ses_")
        assert session.image.id.startswith("img_")
        assert (session.image.width, session.image.height, session.image.channels) == (32, 24, 3)
        assert session.image.file_size == 42

    def test_original_is_a_frozen_copy(self, gray_ramp):
        session = SessionStore().create(gray_ramp, mime_type="image/png")
        assert not np.shares_memory(session.original, gray_ramp)
        with pytest.raises(ValueError):
            session.original[0, 0] = 1

    def test_unknown_session(self):
        with pytest.raises(SessionNotFoundError):
            SessionStore().get("ses_nope")

    def test_delete(self, gray_ramp):
        store = SessionStore()
        session = store.create(gray_ramp, mime_type="image/png")
        assert store.delete(session.id) is True
        assert store.delete(session.id) is False
        assert session.id not in store

    def test_evicts_least_recently_used(self, gray_ramp):
        store = SessionStore(max_sessions=2)
        first = store.create(gray_ramp, mime_type="image/png")
        second = store.create(gray_ramp, mime_type="image/png")
        store.get(first.id)  # touch: second is now the oldest
        third = store.create(gray_ramp, mime_type="image/png")

        assert len(store) == 2
        assert first.id in store
        assert third.id in store
        assert second.id not in store
