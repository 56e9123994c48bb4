"""Temporal and separable spatial 1-D convolutions for frame stacks."""
from __future__ import annotations

from typing import Sequence

import numpy as np

from .constants import AXIS_COL, AXIS_ROW


def _as_kernel(kernel, dtype=None) -> np.ndarray:
    arr = np.asarray(kernel, dtype=dtype)
    if arr.ndim != 1 or arr.size == 0:
        raise ValueError("kernel must be a non-empty 1-D array")
    return arr


def convolve_temporal(frames: Sequence[np.ndarray], kernel, dtype=None) -> np.ndarray:
    """
    Filter a frame stack along time, independently at every pixel.

    ``frames`` is ordered newest first and must hold exactly ``len(kernel)``
    frames. The oldest frame meets the first tap:
    ``out = sum_k frames[K-1-k] * kernel[k]``.

    uint8 frames filtered into a floating output are scaled by 1/255.
    """
    if dtype is None:
        dtype = np.asarray(kernel).dtype
    out_dtype = np.dtype(dtype)
    taps = _as_kernel(kernel, out_dtype)
    kernel_len = taps.shape[0]
    if len(frames) != kernel_len:
        raise ValueError(f"Expected {kernel_len} frames for temporal kernel, got {len(frames)}")

    shape = np.shape(frames[0])
    out = np.zeros(shape, dtype=out_dtype)
    for k in range(kernel_len):
        frame = np.asarray(frames[kernel_len - 1 - k])
        if frame.shape != shape:
            raise ValueError(f"Frame shape mismatch: {frame.shape} vs {shape}")
        samples = frame.astype(out_dtype, copy=False)
        if frame.dtype == np.uint8 and out_dtype.kind == "f":
            samples = samples * out_dtype.type(1.0 / 255.0)
        out += samples * taps[k]
    return out


def convolve_spatial(image: np.ndarray, kernel, axis: int) -> np.ndarray:
    """
    Correlate ``image`` with a 1-D kernel along one axis.

    Only pixels at least ``len(kernel) >> 1`` samples away from every edge are
    filtered; all others are set to zero.
    """
    img = np.asarray(image)
    if img.ndim != 2:
        raise ValueError("image must be 2-D")
    if axis not in (AXIS_ROW, AXIS_COL):
        raise ValueError(f"Unknown axis {axis}")
    if img.dtype.kind != "f":
        img = img.astype(np.float64)
    taps = _as_kernel(kernel, img.dtype)
    rows, cols = img.shape
    half = taps.shape[0] >> 1

    out = np.zeros_like(img)
    r0, r1 = half, rows - half
    c0, c1 = half, cols - half
    if r1 <= r0 or c1 <= c0:
        return out

    acc = np.zeros((r1 - r0, c1 - c0), dtype=img.dtype)
    for k, tap in enumerate(taps):
        shift = k - half
        if axis == AXIS_COL:
            acc += img[r0:r1, c0 + shift : c1 + shift] * tap
        else:
            acc += img[r0 + shift : r1 + shift, c0:c1] * tap
    out[r0:r1, c0:c1] = acc
    return out


def filter_both_axes(image: np.ndarray, kernel_x, kernel_y) -> np.ndarray:
    """Separable 2-D filter: ``kernel_x`` along columns, then ``kernel_y`` along rows."""
    tmp = convolve_spatial(image, kernel_x, AXIS_COL)
    return convolve_spatial(tmp, kernel_y, AXIS_ROW)
