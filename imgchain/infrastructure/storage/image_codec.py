from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

import numpy as np
from PIL import Image, UnidentifiedImageError

from imgchain.domain.errors import DecodeFailureError

DOWNLOAD_BASENAME = "processed_image"
_FORMATS = {"png": "PNG", "jpg": "JPEG", "jpeg": "JPEG"}


@dataclass
class EncodedImage:
    data: bytes
    content_type: str
    ext: str

    @property
    def filename(self) -> str:
        return f"{DOWNLOAD_BASENAME}.{self.ext}"


@dataclass
class DecodedImage:
    array: np.ndarray
    mime_type: str
    size: int


class ImageCodec:
    """Pillow-backed conversion between encoded files and uint8 arrays.

    Grayscale files decode to (H, W); everything else decodes to RGB (H, W, 3).
    Alpha is dropped.
    """

    def decode(self, data: bytes) -> DecodedImage:
        if not data:
            raise DecodeFailureError("Empty image file")
        try:
            img = Image.open(BytesIO(data))
            img.load()
            fmt = img.format
            img = img.convert("L") if img.mode in ("1", "L", "LA", "I", "I;16", "F") else img.convert("RGB")
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise DecodeFailureError(f"Invalid image file: {exc}") from exc
        arr = np.asarray(img, dtype=np.uint8).copy()
        return DecodedImage(array=arr, mime_type=Image.MIME.get(fmt or "", "image/png"), size=len(data))

    def encode(self, array: np.ndarray, ext: str = "png") -> EncodedImage:
        ext = ext.lower().lstrip(".")
        fmt = _FORMATS.get(ext)
        if fmt is None:
            raise ValueError(f"Unsupported export format: {ext}")
        arr = np.ascontiguousarray(array, dtype=np.uint8)
        if arr.ndim == 3 and arr.shape[2] == 1:
            arr = arr[..., 0]
        img = Image.fromarray(arr if arr.ndim == 2 else np.ascontiguousarray(arr[..., :3]))
        buf = BytesIO()
        if fmt == "JPEG":
            img.save(buf, format=fmt, quality=95)
        else:
            img.save(buf, format=fmt)
        content_type = f"image/{'png' if fmt == 'PNG' else 'jpeg'}"
        return EncodedImage(data=buf.getvalue(), content_type=content_type, ext=ext)
