"""Spatio-temporal derivatives and the smoothed structure tensor."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .convolution import convolve_temporal, filter_both_axes
from .kernels import KernelSet


@dataclass
class StructureTensor:
    """Per-pixel gradient products, each smoothed by the window kernel."""

    xx: np.ndarray
    yy: np.ndarray
    xy: np.ndarray
    xt: np.ndarray
    yt: np.ndarray


def temporal_window(t_kernel_len: int, t_grad_kernel_len: int) -> tuple[int, int, int]:
    """
    Center the shorter temporal kernel inside the longer one.

    Returns ``(start_t, start_tg, num_frames)``. The offset uses floor
    division, so an odd length difference leans towards the newer frames.
    """
    if t_grad_kernel_len > t_kernel_len:
        return (t_grad_kernel_len - t_kernel_len) >> 1, 0, t_grad_kernel_len
    return 0, (t_kernel_len - t_grad_kernel_len) >> 1, t_kernel_len


def compute_derivatives(
    frames: Sequence[np.ndarray], kernels: KernelSet, dtype
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return the filtered ``(dx, dy, dt)`` buffers for the middle of ``frames``."""
    t_len = len(kernels.t_kernel)
    tg_len = len(kernels.t_grad_kernel)
    start_t, start_tg, num_frames = temporal_window(t_len, tg_len)
    if len(frames) < num_frames:
        raise ValueError(f"Temporal kernels need {num_frames} frames, got {len(frames)}")

    dx = convolve_temporal(frames[start_t : start_t + t_len], kernels.t_kernel, dtype)
    dy = dx.copy()
    dt = convolve_temporal(frames[start_tg : start_tg + tg_len], kernels.t_grad_kernel, dtype)

    dx = filter_both_axes(dx, kernels.s_grad_kernel, kernels.s_kernel)
    dy = filter_both_axes(dy, kernels.s_kernel, kernels.s_grad_kernel)
    dt = filter_both_axes(dt, kernels.s_kernel, kernels.s_kernel)
    return dx, dy, dt


def build_structure_tensor(frames: Sequence[np.ndarray], kernels: KernelSet, dtype) -> StructureTensor:
    dx, dy, dt = compute_derivatives(frames, kernels, dtype)
    w = kernels.w_kernel
    return StructureTensor(
        xx=filter_both_axes(dx * dx, w, w),
        yy=filter_both_axes(dy * dy, w, w),
        xy=filter_both_axes(dx * dy, w, w),
        xt=filter_both_axes(dx * dt, w, w),
        yt=filter_both_axes(dy * dt, w, w),
    )
