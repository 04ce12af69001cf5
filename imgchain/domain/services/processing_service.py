from __future__ import annotations

from collections.abc import Sequence

import cv2
import numpy as np


class ProcessingService:
    """OpenCV image transforms. Inputs and outputs are uint8 arrays.

    Channel convention:
    - Grayscale: (H, W)
    - RGB: (H, W, 3)

    Transforms never modify their input; each returns a newly allocated array.
    """

    # Global histogram equalization on the luma channel
    @staticmethod
    def equalize_histogram(matrix: np.ndarray) -> np.ndarray:
        return cv2.equalizeHist(ProcessingService.to_luma(matrix))

    # CLAHE: tiled equalization with contrast limited by clip_limit
    @staticmethod
    def adaptive_equalize_histogram(
        matrix: np.ndarray, clip_limit: float, tile_size: int
    ) -> np.ndarray:
        clahe = cv2.createCLAHE(
            clipLimit=float(clip_limit), tileGridSize=(int(tile_size), int(tile_size))
        )
        return clahe.apply(ProcessingService.to_luma(matrix))

    # Canny with a fixed 3x3 Sobel aperture and L1 gradient norm
    @staticmethod
    def detect_edges(matrix: np.ndarray, threshold1: float, threshold2: float) -> np.ndarray:
        return cv2.Canny(
            ProcessingService.to_luma(matrix),
            float(threshold1),
            float(threshold2),
            apertureSize=3,
            L2gradient=False,
        )

    # Unsharp mask: out = (1 + amount) * src - amount * gaussian(src, sigma)
    @staticmethod
    def unsharp_mask(matrix: np.ndarray, sigma: float, amount: float) -> np.ndarray:
        blurred = cv2.GaussianBlur(matrix, (0, 0), float(sigma), sigmaY=float(sigma))
        return cv2.addWeighted(matrix, 1.0 + float(amount), blurred, -float(amount), 0)

    # High pass: out = src - gaussian(src, kernel_size), saturated at 0
    @staticmethod
    def high_pass(matrix: np.ndarray, kernel_size: int) -> np.ndarray:
        k = int(kernel_size)
        low_pass = cv2.GaussianBlur(matrix, (k, k), 0)
        return cv2.subtract(matrix, low_pass)

    # Laplacian into an 8-bit destination: negative responses clip to 0
    @staticmethod
    def laplacian(matrix: np.ndarray, kernel_size: int, scale: float) -> np.ndarray:
        return cv2.Laplacian(
            ProcessingService.to_luma(matrix),
            cv2.CV_8U,
            ksize=int(kernel_size),
            scale=float(scale),
            delta=0,
            borderType=cv2.BORDER_DEFAULT,
        )

    # Invert: I_out = 255 - I_in on every channel
    @staticmethod
    def invert_color(matrix: np.ndarray) -> np.ndarray:
        return cv2.bitwise_not(matrix)

    # Binary threshold: 255 where luma > threshold, else 0
    @staticmethod
    def threshold(matrix: np.ndarray, threshold: float) -> np.ndarray:
        _, out = cv2.threshold(
            ProcessingService.to_luma(matrix), float(threshold), 255, cv2.THRESH_BINARY
        )
        return out

    # Lookup-table colorization of the luma channel, returned as RGB
    @staticmethod
    def pseudocolor(matrix: np.ndarray, color_map: int) -> np.ndarray:
        bgr = cv2.applyColorMap(ProcessingService.to_luma(matrix), int(color_map))
        return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)

    # DFT magnitude of the zero-padded luma channel, min-max scaled to 0..255.
    # The output keeps the padded (optimal DFT) size.
    @staticmethod
    def fourier_magnitude(matrix: np.ndarray) -> np.ndarray:
        gray = ProcessingService.to_luma(matrix)
        rows, cols = gray.shape[:2]
        m = cv2.getOptimalDFTSize(rows)
        n = cv2.getOptimalDFTSize(cols)
        padded = cv2.copyMakeBorder(
            gray, 0, m - rows, 0, n - cols, cv2.BORDER_CONSTANT, value=0
        )
        spectrum = cv2.dft(padded.astype(np.float32), flags=cv2.DFT_COMPLEX_OUTPUT)
        magnitude = cv2.magnitude(spectrum[..., 0], spectrum[..., 1])
        return cv2.normalize(magnitude, None, 0, 255, cv2.NORM_MINMAX, cv2.CV_8U)

    # Per-channel gain on R, G, B
    @staticmethod
    def boost_colors(matrix: np.ndarray, boost_factor: Sequence[float]) -> np.ndarray:
        rgb = ProcessingService.to_rgb(matrix).astype(np.float32)
        gains = np.asarray(boost_factor, dtype=np.float32)[:3]
        return ProcessingService._saturate(rgb * gains)

    # out[i] = sum_j mix_factors[i][j] * in[j], saturated
    @staticmethod
    def mix_channels(matrix: np.ndarray, mix_factors: Sequence[Sequence[float]]) -> np.ndarray:
        rgb = ProcessingService.to_rgb(matrix)
        weights = np.asarray(mix_factors, dtype=np.float32).reshape(3, 3)
        return cv2.transform(rgb, weights)

    # Grayscale expanded to RGB plus a flat tint, saturated
    @staticmethod
    def colorize(matrix: np.ndarray, color_tint: Sequence[float]) -> np.ndarray:
        rgb = cv2.cvtColor(ProcessingService.to_luma(matrix), cv2.COLOR_GRAY2RGB)
        tint = np.asarray(color_tint, dtype=np.float32)[:3]
        return ProcessingService._saturate(rgb.astype(np.float32) + tint)

    # Multi-scale retinex: acc = -sum_s log(1 + gaussian(src, s)), min-max scaled.
    # Accumulation is float32 throughout; the +1 keeps log finite on black pixels.
    @staticmethod
    def multi_scale_retinex(matrix: np.ndarray, scales: Sequence[float]) -> np.ndarray:
        src = matrix.astype(np.float32)
        acc = np.zeros_like(src)
        for scale in scales:
            blurred = cv2.GaussianBlur(src, (0, 0), float(scale), sigmaY=float(scale))
            acc -= cv2.log(blurred + 1.0).reshape(acc.shape)
        return cv2.normalize(acc, None, 0, 255, cv2.NORM_MINMAX, cv2.CV_8U)

    # Convolution of the luma channel with a Gabor kernel
    @staticmethod
    def gabor(
        matrix: np.ndarray,
        kernel_size: int,
        sigma: float,
        theta: float,
        lambd: float,
        gamma: float,
        psi: float,
    ) -> np.ndarray:
        k = int(kernel_size)
        kernel = cv2.getGaborKernel(
            (k, k), float(sigma), float(theta), float(lambd), float(gamma), float(psi),
            ktype=cv2.CV_32F,
        )
        return cv2.filter2D(ProcessingService.to_luma(matrix), cv2.CV_8U, kernel)

    # --------- helpers ---------
    @staticmethod
    def to_luma(matrix: np.ndarray) -> np.ndarray:
        """Single channel view of an image (ITU-R 601 weights for color input)."""
        if matrix.ndim == 2:
            return matrix
        if matrix.shape[2] == 1:
            return matrix[..., 0]
        if matrix.shape[2] == 4:
            return cv2.cvtColor(matrix, cv2.COLOR_RGBA2GRAY)
        return cv2.cvtColor(matrix, cv2.COLOR_RGB2GRAY)

    @staticmethod
    def to_rgb(matrix: np.ndarray) -> np.ndarray:
        if matrix.ndim == 2:
            return cv2.cvtColor(matrix, cv2.COLOR_GRAY2RGB)
        if matrix.shape[2] == 1:
            return cv2.cvtColor(matrix[..., 0], cv2.COLOR_GRAY2RGB)
        if matrix.shape[2] == 4:
            return cv2.cvtColor(matrix, cv2.COLOR_RGBA2RGB)
        return matrix

    @staticmethod
    def _saturate(values: np.ndarray) -> np.ndarray:
        return np.clip(np.rint(values), 0, 255).astype(np.uint8)
