from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class OperationId(str, Enum):
    HISTOGRAM_EQUALIZATION = "Histogram Equalization"
    ADAPTIVE_HISTOGRAM_EQUALIZATION = "Adaptive Histogram Equalization"
    EDGE_DETECTION = "Edge Detection"
    UNSHARP_MASKING = "Unsharp Masking"
    HIGH_PASS_FILTERING = "High-Pass Filtering"
    LAPLACIAN_FILTERING = "Laplacian Filtering"
    COLOR_INVERSION = "Color Inversion"
    THRESHOLDING = "Thresholding"
    PSEUDOCOLOR_MAPPING = "Pseudocolor Mapping"
    FOURIER_TRANSFORM = "Fourier Transform"
    COLOR_BOOSTING = "Color Boosting"
    CHANNEL_MIXING_SIMULATION = "Channel Mixing Simulation"
    MANUAL_COLORIZATION = "Manual Colorization"
    MULTI_SCALE_RETINEX = "Multi-Scale Retinex"
    GABOR_FILTER = "Gabor Filter"


Vector3 = tuple[float, float, float]
Matrix3 = tuple[Vector3, Vector3, Vector3]


@dataclass(frozen=True)
class ProcessingParams:
    """Snapshot of every tunable used by any operation.

    Vectors and matrices are stored as tuples so that a snapshot taken when a
    step is added cannot be changed afterwards through a shared list.
    """

    clip_limit: float = 2.0
    tile_size: int = 8
    threshold1: float = 50.0
    threshold2: float = 150.0
    sigma: float = 3.0
    amount: float = 1.5
    kernel_size: int = 3
    scale: float = 1.0
    threshold: float = 127.0
    color_map: int = 2
    boost_factor: Vector3 = (1.0, 1.0, 1.0)
    mix_factors: Matrix3 = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))
    color_tint: Vector3 = (128.0, 128.0, 128.0)
    retinex_scales: tuple[float, ...] = (15.0, 80.0, 250.0)
    gabor_kernel_size: int = 31
    gabor_sigma: float = 5.0
    gabor_theta: float = 0.0
    gabor_lambda: float = 10.0
    gabor_gamma: float = 0.5
    gabor_psi: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProcessingParams:
        """Build a snapshot from loose values, copying every sequence into a tuple."""
        known = {f for f in cls.__dataclass_fields__}
        values: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known or value is None:
                continue
            if key == "mix_factors":
                value = tuple(tuple(float(v) for v in row) for row in value)
            elif key in ("boost_factor", "color_tint", "retinex_scales"):
                value = tuple(float(v) for v in value)
            values[key] = value
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProcessingStep:
    operation: OperationId
    params: ProcessingParams = field(default_factory=ProcessingParams)

    def relevant_params(self) -> dict[str, Any]:
        """Only the snapshot fields the step's operation actually reads."""
        # local import: the catalog depends on this module
        from imgchain.domain.services.operation_catalog import get_operation

        data = self.params.to_dict()
        return {name: data[name] for name in get_operation(self.operation).fields}
