"""Catalog of the fifteen supported operations.

Each ``OperationSpec`` names the snapshot fields its operation reads, the
validator for those fields and the transform itself. The catalog must cover
every ``OperationId``; this is checked when the module is imported.
"""
from __future__ import annotations

import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass

import numpy as np

from imgchain.domain.entities.processing_step import OperationId, ProcessingParams
from imgchain.domain.errors import InvalidParameterError, UnsupportedOperationError
from imgchain.domain.services.processing_service import ProcessingService as PS

# OpenCV ships palettes 0 (COLORMAP_AUTUMN) .. 21 (COLORMAP_DEEPGREEN)
MAX_COLOR_MAP = 21
MAX_KERNEL_SIZE = 31
# upper bounds for blur sigmas (kernel size grows with sigma) and CLAHE tiles
MAX_BLUR_SIGMA = 100
MAX_RETINEX_SCALE = 300
MAX_TILE_SIZE = 64


@dataclass(frozen=True)
class FieldSchema:
    """Form hints for one snapshot field, as shown by the editor."""

    label: str
    minimum: float | None = None
    maximum: float | None = None
    step: float | None = None
    size: int | None = None  # component count for vector fields


FIELD_SCHEMAS: dict[str, FieldSchema] = {
    "clip_limit": FieldSchema("Clip Limit", 0, 10, 0.1),
    "tile_size": FieldSchema("Tile Size", 2, 16, 1),
    "threshold1": FieldSchema("Threshold 1", 0, 255, 1),
    "threshold2": FieldSchema("Threshold 2", 0, 255, 1),
    "sigma": FieldSchema("Sigma", 0.1, 10, 0.1),
    "amount": FieldSchema("Amount", 0, 5, 0.1),
    "kernel_size": FieldSchema("Kernel Size", 1, 31, 2),
    "scale": FieldSchema("Scale"),
    "threshold": FieldSchema("Threshold", 0, 255, 1),
    "color_map": FieldSchema("Color Map", 0, MAX_COLOR_MAP, 1),
    "boost_factor": FieldSchema("Boost (R, G, B)", 0, 3, 0.1, size=3),
    "mix_factors": FieldSchema("Mix Matrix (rows: R, G, B out)", -2, 2, 0.1, size=9),
    "color_tint": FieldSchema("Tint (R, G, B)", 0, 255, 1, size=3),
    "retinex_scales": FieldSchema("Retinex Scales", 1, 100, 1),
    "gabor_kernel_size": FieldSchema("Kernel Size", 3, 31, 2),
    "gabor_sigma": FieldSchema("Sigma", 0.1, 10, 0.1),
    "gabor_theta": FieldSchema("Theta", 0, 6.28, 0.1),
    "gabor_lambda": FieldSchema("Lambda", 0.1, 10, 0.1),
    "gabor_gamma": FieldSchema("Gamma", 0.1, 1, 0.1),
    "gabor_psi": FieldSchema("Psi", 0, 6.28, 0.1),
}


Transform = Callable[[np.ndarray, ProcessingParams], np.ndarray]
Validator = Callable[[OperationId, ProcessingParams], None]


@dataclass(frozen=True)
class OperationSpec:
    id: OperationId
    fields: tuple[str, ...]
    grayscale: bool  # converts its input to luma first
    transform: Transform
    validate: Validator
    description: str = ""

    def apply(self, matrix: np.ndarray, params: ProcessingParams) -> np.ndarray:
        self.validate(self.id, params)
        return self.transform(matrix, params)


# --------- validators ---------
def _require(ok: bool, op: OperationId, field: str, message: str) -> None:
    if not ok:
        raise InvalidParameterError(op.value, field, message)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool)


def _finite(op: OperationId, field: str, value: object) -> float:
    _require(_is_number(value) and math.isfinite(float(value)), op, field, "must be a finite number")
    return float(value)


def _integer(op: OperationId, field: str, value: object) -> int:
    number = _finite(op, field, value)
    _require(number.is_integer(), op, field, "must be an integer")
    return int(number)


def _odd_kernel(op: OperationId, field: str, value: object, minimum: int) -> None:
    k = _integer(op, field, value)
    _require(k % 2 == 1, op, field, "must be odd")
    _require(minimum <= k <= MAX_KERNEL_SIZE, op, field, f"must be in [{minimum}, {MAX_KERNEL_SIZE}]")


def _components(op: OperationId, field: str, values: Iterable[object], size: int) -> list[float]:
    items = list(values)
    _require(len(items) == size, op, field, f"must have {size} components")
    return [_finite(op, field, v) for v in items]


def _no_params(op: OperationId, params: ProcessingParams) -> None:
    return None


def _validate_clahe(op: OperationId, p: ProcessingParams) -> None:
    _require(_finite(op, "clip_limit", p.clip_limit) >= 0, op, "clip_limit", "must be >= 0")
    tiles = _integer(op, "tile_size", p.tile_size)
    _require(1 <= tiles <= MAX_TILE_SIZE, op, "tile_size", f"must be in [1, {MAX_TILE_SIZE}]")


def _validate_edges(op: OperationId, p: ProcessingParams) -> None:
    for name in ("threshold1", "threshold2"):
        _require(_finite(op, name, getattr(p, name)) >= 0, op, name, "must be >= 0")


def _validate_unsharp(op: OperationId, p: ProcessingParams) -> None:
    sigma = _finite(op, "sigma", p.sigma)
    _require(0 < sigma <= MAX_BLUR_SIGMA, op, "sigma", f"must be in (0, {MAX_BLUR_SIGMA}]")
    _require(_finite(op, "amount", p.amount) >= 0, op, "amount", "must be >= 0")


def _validate_high_pass(op: OperationId, p: ProcessingParams) -> None:
    _odd_kernel(op, "kernel_size", p.kernel_size, minimum=1)


def _validate_laplacian(op: OperationId, p: ProcessingParams) -> None:
    _odd_kernel(op, "kernel_size", p.kernel_size, minimum=1)
    _finite(op, "scale", p.scale)


def _validate_threshold(op: OperationId, p: ProcessingParams) -> None:
    value = _finite(op, "threshold", p.threshold)
    _require(0 <= value <= 255, op, "threshold", "must be in [0, 255]")


def _validate_color_map(op: OperationId, p: ProcessingParams) -> None:
    index = _integer(op, "color_map", p.color_map)
    _require(0 <= index <= MAX_COLOR_MAP, op, "color_map", f"must be in [0, {MAX_COLOR_MAP}]")


def _validate_boost(op: OperationId, p: ProcessingParams) -> None:
    gains = _components(op, "boost_factor", p.boost_factor, 3)
    _require(all(g >= 0 for g in gains), op, "boost_factor", "components must be >= 0")


def _validate_mix(op: OperationId, p: ProcessingParams) -> None:
    rows = list(p.mix_factors)
    _require(len(rows) == 3, op, "mix_factors", "must have 3 rows")
    for row in rows:
        _components(op, "mix_factors", row, 3)


def _validate_tint(op: OperationId, p: ProcessingParams) -> None:
    _components(op, "color_tint", p.color_tint, 3)


def _validate_retinex(op: OperationId, p: ProcessingParams) -> None:
    scales = list(p.retinex_scales)
    _require(len(scales) > 0, op, "retinex_scales", "at least one scale is required")
    for scale in scales:
        value = _finite(op, "retinex_scales", scale)
        _require(
            0 < value <= MAX_RETINEX_SCALE,
            op,
            "retinex_scales",
            f"scales must be in (0, {MAX_RETINEX_SCALE}]",
        )


def _validate_gabor(op: OperationId, p: ProcessingParams) -> None:
    _odd_kernel(op, "gabor_kernel_size", p.gabor_kernel_size, minimum=3)
    for name in ("gabor_sigma", "gabor_lambda", "gabor_gamma"):
        _require(_finite(op, name, getattr(p, name)) > 0, op, name, "must be > 0")
    _finite(op, "gabor_theta", p.gabor_theta)
    _finite(op, "gabor_psi", p.gabor_psi)


# --------- catalog ---------
_CATALOG: dict[OperationId, OperationSpec] = {
    spec.id: spec
    for spec in (
        OperationSpec(
            OperationId.HISTOGRAM_EQUALIZATION,
            (),
            True,
            lambda m, p: PS.equalize_histogram(m),
            _no_params,
            "Global histogram equalization of the luma channel.",
        ),
        OperationSpec(
            OperationId.ADAPTIVE_HISTOGRAM_EQUALIZATION,
            ("clip_limit", "tile_size"),
            True,
            lambda m, p: PS.adaptive_equalize_histogram(m, p.clip_limit, p.tile_size),
            _validate_clahe,
            "Contrast limited adaptive histogram equalization (CLAHE) over square tiles.",
        ),
        OperationSpec(
            OperationId.EDGE_DETECTION,
            ("threshold1", "threshold2"),
            True,
            lambda m, p: PS.detect_edges(m, p.threshold1, p.threshold2),
            _validate_edges,
            "Canny edges with hysteresis thresholds.",
        ),
        OperationSpec(
            OperationId.UNSHARP_MASKING,
            ("sigma", "amount"),
            False,
            lambda m, p: PS.unsharp_mask(m, p.sigma, p.amount),
            _validate_unsharp,
            "Sharpen by subtracting a Gaussian blurred copy.",
        ),
        OperationSpec(
            OperationId.HIGH_PASS_FILTERING,
            ("kernel_size",),
            False,
            lambda m, p: PS.high_pass(m, p.kernel_size),
            _validate_high_pass,
            "Source minus its Gaussian low pass.",
        ),
        OperationSpec(
            OperationId.LAPLACIAN_FILTERING,
            ("kernel_size", "scale"),
            True,
            lambda m, p: PS.laplacian(m, p.kernel_size, p.scale),
            _validate_laplacian,
            "Scaled Laplacian response, negative values clipped to 0.",
        ),
        OperationSpec(
            OperationId.COLOR_INVERSION,
            (),
            False,
            lambda m, p: PS.invert_color(m),
            _no_params,
            "Bitwise complement of every channel.",
        ),
        OperationSpec(
            OperationId.THRESHOLDING,
            ("threshold",),
            True,
            lambda m, p: PS.threshold(m, p.threshold),
            _validate_threshold,
            "Binary threshold: 255 above the cutoff, 0 otherwise.",
        ),
        OperationSpec(
            OperationId.PSEUDOCOLOR_MAPPING,
            ("color_map",),
            True,
            lambda m, p: PS.pseudocolor(m, p.color_map),
            _validate_color_map,
            "Colorize intensity with an OpenCV palette.",
        ),
        OperationSpec(
            OperationId.FOURIER_TRANSFORM,
            (),
            True,
            lambda m, p: PS.fourier_magnitude(m),
            _no_params,
            "DFT magnitude spectrum at the padded optimal transform size.",
        ),
        OperationSpec(
            OperationId.COLOR_BOOSTING,
            ("boost_factor",),
            False,
            lambda m, p: PS.boost_colors(m, p.boost_factor),
            _validate_boost,
            "Per-channel multiplicative gain.",
        ),
        OperationSpec(
            OperationId.CHANNEL_MIXING_SIMULATION,
            ("mix_factors",),
            False,
            lambda m, p: PS.mix_channels(m, p.mix_factors),
            _validate_mix,
            "Recombine R, G, B through a 3x3 weight matrix.",
        ),
        OperationSpec(
            OperationId.MANUAL_COLORIZATION,
            ("color_tint",),
            True,
            lambda m, p: PS.colorize(m, p.color_tint),
            _validate_tint,
            "Grayscale as RGB plus a flat tint.",
        ),
        OperationSpec(
            OperationId.MULTI_SCALE_RETINEX,
            ("retinex_scales",),
            False,
            lambda m, p: PS.multi_scale_retinex(m, p.retinex_scales),
            _validate_retinex,
            "Log-domain illumination normalization over several blur scales.",
        ),
        OperationSpec(
            OperationId.GABOR_FILTER,
            (
                "gabor_kernel_size",
                "gabor_sigma",
                "gabor_theta",
                "gabor_lambda",
                "gabor_gamma",
                "gabor_psi",
            ),
            True,
            lambda m, p: PS.gabor(
                m,
                p.gabor_kernel_size,
                p.gabor_sigma,
                p.gabor_theta,
                p.gabor_lambda,
                p.gabor_gamma,
                p.gabor_psi,
            ),
            _validate_gabor,
            "Convolution with an oriented Gabor kernel.",
        ),
    )
}

_missing = [op.value for op in OperationId if op not in _CATALOG]
if _missing:  # pragma: no cover - guards edits to the table above
    raise RuntimeError(f"Operations without a catalog entry: {_missing}")


def resolve_operation_id(operation: OperationId | str) -> OperationId:
    """Accept an ``OperationId``, its label ("Color Inversion") or its name ("COLOR_INVERSION")."""
    if isinstance(operation, OperationId):
        return operation
    if isinstance(operation, str):
        try:
            return OperationId(operation)
        except ValueError:
            pass
        member = OperationId.__members__.get(operation.upper())
        if member is not None:
            return member
    raise UnsupportedOperationError(operation)


def get_operation(operation: OperationId | str) -> OperationSpec:
    spec = _CATALOG.get(resolve_operation_id(operation))
    if spec is None:
        raise UnsupportedOperationError(operation)
    return spec


def list_operations() -> list[OperationSpec]:
    return [_CATALOG[op] for op in OperationId]


def validate_step(operation: OperationId | str, params: ProcessingParams) -> OperationSpec:
    spec = get_operation(operation)
    spec.validate(spec.id, params)
    return spec


def apply_operation(
    operation: OperationId | str, matrix: np.ndarray, params: ProcessingParams
) -> np.ndarray:
    return get_operation(operation).apply(matrix, params)
