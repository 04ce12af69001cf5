import os
import sys
from pathlib import Path

import numpy as np
import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so 'imgchain' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("IMGCHAIN_LOG_LEVEL", "WARNING")
os.environ.setdefault("IMGCHAIN_CAPABILITY_TIMEOUT", "30")


class ReadyCapability:
    """Capability double that is always loaded."""

    is_ready = True

    async def wait_ready(self, timeout=None):
        return None


@pytest.fixture(scope="session")
def client() -> TestClient:
    # lazy import after env configured
    from imgchain.main import create_app

    app = create_app()
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def ready_capability() -> ReadyCapability:
    return ReadyCapability()


@pytest.fixture()
def gray_ramp() -> np.ndarray:
    # 16x16 grayscale image holding every value 0..255 once
    return np.arange(256, dtype=np.uint8).reshape(16, 16)


@pytest.fixture()
def rgb_image() -> np.ndarray:
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(24, 32, 3), dtype=np.uint8)
