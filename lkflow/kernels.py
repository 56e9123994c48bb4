"""Gaussian and derivative-of-Gaussian kernels for LK flow."""
from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .constants import (
    MAX_FRAMES_FULL_DERIVATIVE,
    MAX_NUM_FRAMES,
    MIN_NUM_FRAMES,
    SIGMA_T_RANGE,
    SIGMA_T_TUNING_FACTOR,
)


def kernel_width_from_sigma(sigma: float) -> int:
    """Return ``floor(6 * sigma + 1)`` rounded up to the next odd number."""
    width = int(math.floor(6.0 * sigma + 1.0))
    if width % 2 == 0:
        width += 1
    return width


def gaussian_kernel(length: int, sigma: float) -> np.ndarray:
    half = length // 2
    x = np.arange(-half, half + 1, dtype=np.float64)
    coeff = 1.0 / (math.sqrt(2.0 * math.pi) * sigma)
    return coeff * np.exp(-x * x / (2.0 * sigma * sigma))


def gaussian_derivative_kernel(length: int, sigma: float) -> np.ndarray:
    half = length // 2
    x = np.arange(-half, half + 1, dtype=np.float64)
    coeff = 1.0 / (math.sqrt(2.0 * math.pi) * sigma * sigma * sigma)
    return -coeff * x * np.exp(-x * x / (2.0 * sigma * sigma))


def check_num_frames(num_frames: int) -> int:
    if isinstance(num_frames, bool) or int(num_frames) != num_frames:
        raise ValueError(f"num_frames must be an integer, got {num_frames!r}")
    n = int(num_frames)
    if n % 2 == 0 or not (MIN_NUM_FRAMES <= n <= MAX_NUM_FRAMES):
        raise ValueError(f"num_frames must be odd and within [{MIN_NUM_FRAMES}, {MAX_NUM_FRAMES}], got {n}")
    return n


def temporal_sigma(num_frames: int) -> float:
    """
    Temporal Gaussian sigma for a stack of ``num_frames``.

    Interpolates halfway inside the sigma band whose derivative kernel width
    matches the stack size.
    """
    idx = (check_num_frames(num_frames) - MIN_NUM_FRAMES) // 2
    lo = SIGMA_T_RANGE[idx]
    hi = SIGMA_T_RANGE[idx + 1]
    return lo + (hi - lo) * SIGMA_T_TUNING_FACTOR


def temporal_widths(num_frames: int) -> tuple[int, int]:
    """Return ``(width_gauss, width_derivative_gauss)`` for the temporal kernels."""
    n = check_num_frames(num_frames)
    sigma_t = temporal_sigma(n)
    if n <= MAX_FRAMES_FULL_DERIVATIVE:
        width_der = n
        width = min(kernel_width_from_sigma(sigma_t), width_der)
    else:
        width = n
        width_der = min(kernel_width_from_sigma(math.sqrt(2.0 * sigma_t)), width)
    return width, width_der


@dataclass
class KernelSet:
    t_kernel: np.ndarray
    t_grad_kernel: np.ndarray
    s_kernel: np.ndarray
    s_grad_kernel: np.ndarray
    w_kernel: np.ndarray

    @classmethod
    def from_parameters(
        cls,
        num_frames: int,
        image_filter_sigma: float,
        gradient_filter_sigma: float,
    ) -> "KernelSet":
        sigma_t = temporal_sigma(num_frames)
        sigma_t_der = math.sqrt(2.0 * sigma_t)
        # Both temporal kernels span the derivative width.
        _, t_len = temporal_widths(num_frames)

        sigma_s_der = math.sqrt(2.0 * image_filter_sigma)
        s_grad_len = kernel_width_from_sigma(sigma_s_der)
        s_len = kernel_width_from_sigma(image_filter_sigma)
        w_len = kernel_width_from_sigma(gradient_filter_sigma)

        return cls(
            t_kernel=gaussian_kernel(t_len, sigma_t),
            t_grad_kernel=gaussian_derivative_kernel(t_len, sigma_t_der),
            s_kernel=gaussian_kernel(s_len, image_filter_sigma),
            s_grad_kernel=gaussian_derivative_kernel(s_grad_len, sigma_s_der),
            w_kernel=gaussian_kernel(w_len, gradient_filter_sigma),
        )

    def astype(self, dtype) -> "KernelSet":
        return KernelSet(
            t_kernel=np.asarray(self.t_kernel, dtype=dtype),
            t_grad_kernel=np.asarray(self.t_grad_kernel, dtype=dtype),
            s_kernel=np.asarray(self.s_kernel, dtype=dtype),
            s_grad_kernel=np.asarray(self.s_grad_kernel, dtype=dtype),
            w_kernel=np.asarray(self.w_kernel, dtype=dtype),
        )

    @property
    def half_window(self) -> int:
        return len(self.w_kernel) >> 1

    @property
    def num_frames_required(self) -> int:
        return max(len(self.t_kernel), len(self.t_grad_kernel))
