from __future__ import annotations

import asyncio
import importlib
import logging
from types import ModuleType

import numpy as np

from imgchain.domain.errors import CapabilityUnavailableError

logger = logging.getLogger(__name__)


class OpenCVCapability:
    """One-shot readiness gate for the OpenCV backend.

    ``load_async`` imports the module off the event loop and runs a tiny
    warm-up call; the readiness event fires once, whether loading succeeded
    or failed. Renders await ``wait_ready`` before touching any buffer.
    """

    def __init__(self, module_name: str = "cv2") -> None:
        self.module_name = module_name
        self._event = asyncio.Event()
        self._module: ModuleType | None = None
        self.error: str | None = None

    @property
    def is_ready(self) -> bool:
        return self._module is not None

    @property
    def version(self) -> str | None:
        if self._module is None:
            return None
        return getattr(self._module, "__version__", None)

    @property
    def state(self) -> str:
        if self.is_ready:
            return "ready"
        if self.error is not None:
            return "failed"
        return "loading"

    def _import(self) -> ModuleType:
        module = importlib.import_module(self.module_name)
        module.equalizeHist(np.zeros((2, 2), dtype=np.uint8))
        return module

    def load(self) -> None:
        """Blocking load, for scripts and tests."""
        if self._event.is_set():
            return
        try:
            self._module = self._import()
        except Exception as exc:
            self._fail(exc)
            raise CapabilityUnavailableError(self.error) from exc
        self._ready()

    async def load_async(self) -> None:
        if self._event.is_set():
            return
        try:
            self._module = await asyncio.to_thread(self._import)
        except Exception as exc:
            self._fail(exc)
            return
        self._ready()

    async def wait_ready(self, timeout: float | None = None) -> None:
        if not self._event.is_set():
            try:
                await asyncio.wait_for(self._event.wait(), timeout)
            except asyncio.TimeoutError as exc:
                raise CapabilityUnavailableError(
                    f"{self.module_name} did not become ready within {timeout}s"
                ) from exc
        if not self.is_ready:
            raise CapabilityUnavailableError(f"{self.module_name} failed to load: {self.error}")

    def _ready(self) -> None:
        self._event.set()
        logger.info("Image transform capability ready (%s %s)", self.module_name, self.version)

    def _fail(self, exc: Exception) -> None:
        self.error = f"{type(exc).__name__}: {exc}"
        self._event.set()
        logger.error("Image transform capability failed to load: %s", self.error)
