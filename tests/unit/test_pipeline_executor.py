import numpy as np
import pytest

from imgchain.domain.entities.processing_step import OperationId, ProcessingParams, ProcessingStep
from imgchain.domain.errors import (
    CapabilityUnavailableError,
    InvalidParameterError,
    StepFailedError,
)
from imgchain.domain.services.pipeline_executor import PipelineExecutor
from imgchain.domain.services.processing_service import ProcessingService


class NotReadyCapability:
    is_ready = False

    async def wait_ready(self, timeout=None):
        raise CapabilityUnavailableError("not loaded")


def step(op: OperationId, **params) -> ProcessingStep:
    return ProcessingStep(op, ProcessingParams(**params))


@pytest.fixture()
def executor(ready_capability) -> PipelineExecutor:
    return PipelineExecutor(ready_capability)


def test_empty_chain_returns_copy_of_original(executor, rgb_image):
    out = executor.run(rgb_image, [])
    assert np.array_equal(out, rgb_image)
    assert not np.shares_memory(out, rgb_image)


def test_single_inversion_on_gray_4x4(executor):
    img = (np.arange(16, dtype=np.uint8) * 16).reshape(4, 4)
    out = executor.run(img, [step(OperationId.COLOR_INVERSION)])
    assert np.array_equal(out, 255 - img)


def test_double_inversion_is_identity(executor, rgb_image):
    steps = [step(OperationId.COLOR_INVERSION), step(OperationId.COLOR_INVERSION)]
    assert np.array_equal(executor.run(rgb_image, steps), rgb_image)


def test_threshold_scenario(executor, gray_ramp):
    out = executor.run(gray_ramp, [step(OperationId.THRESHOLDING, threshold=127)])
    assert np.all(out[gray_ramp <= 127] == 0)
    assert np.all(out[gray_ramp > 127] == 255)


def test_unsharp_with_zero_amount_is_identity(executor, rgb_image):
    for sigma in (0.5, 3.0, 9.0):
        out = executor.run(rgb_image, [step(OperationId.UNSHARP_MASKING, sigma=sigma, amount=0.0)])
        assert np.array_equal(out, rgb_image)


def test_run_is_pure(executor, rgb_image):
    steps = [
        step(OperationId.UNSHARP_MASKING),
        step(OperationId.CHANNEL_MIXING_SIMULATION, mix_factors=((0.5, 0.5, 0), (0, 1, 0), (0, 0.2, 0.8))),
        step(OperationId.MULTI_SCALE_RETINEX, retinex_scales=(3.0, 7.0)),
        step(OperationId.GABOR_FILTER, gabor_theta=0.7),
    ]
    first = executor.run(rgb_image, steps)
    second = executor.run(rgb_image, steps)
    assert np.array_equal(first, second)


def test_original_is_never_written(executor, rgb_image):
    original = rgb_image.copy()
    original.setflags(write=False)
    steps = [step(op) for op in OperationId]
    executor.run(original, steps)
    assert np.array_equal(original, rgb_image)


def test_every_operation_chains(executor, rgb_image):
    # grayscale producing steps feed color steps and vice versa
    out = executor.run(rgb_image, [step(op) for op in OperationId])
    assert out.dtype == np.uint8
    assert out.ndim == 2


def test_unavailable_capability_aborts_before_processing(rgb_image, monkeypatch):
    calls = []
    monkeypatch.setattr(
        ProcessingService, "invert_color", staticmethod(lambda m: calls.append(m) or m)
    )
    with pytest.raises(CapabilityUnavailableError):
        PipelineExecutor(NotReadyCapability()).run(rgb_image, [step(OperationId.COLOR_INVERSION)])
    assert calls == []


def test_invalid_step_aborts_whole_replay(executor, rgb_image):
    steps = [
        step(OperationId.COLOR_INVERSION),
        step(OperationId.HIGH_PASS_FILTERING, kernel_size=4),
        step(OperationId.COLOR_INVERSION),
    ]
    with pytest.raises(InvalidParameterError, match="kernel_size"):
        executor.run(rgb_image, steps)


def test_library_failure_is_wrapped_with_step_index(executor, rgb_image, monkeypatch):
    def boom(matrix):
        raise ValueError("native failure")

    monkeypatch.setattr(ProcessingService, "equalize_histogram", staticmethod(boom))
    steps = [step(OperationId.COLOR_INVERSION), step(OperationId.HISTOGRAM_EQUALIZATION)]
    with pytest.raises(StepFailedError) as info:
        executor.run(rgb_image, steps)
    assert info.value.index == 1
    assert info.value.operation == "Histogram Equalization"
    assert isinstance(info.value.__cause__, ValueError)
