"""Per-pixel Lucas-Kanade solve on a smoothed structure tensor."""
from __future__ import annotations

from typing import Sequence

import numpy as np

from .constants import THRESH_ABS_DELTA
from .kernels import KernelSet
from .tensor import StructureTensor, build_structure_tensor

SUPPORTED_DTYPES = (np.dtype(np.uint8), np.dtype(np.float32), np.dtype(np.float64))


def solve_flow(
    tensor: StructureTensor,
    eig_th: float,
    half_window: int,
    include_normal_flow: bool = False,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Solve ``[[xx, xy], [xy, yy]] @ (u, v) = -(xt, yt)`` at every pixel.

    Pixels whose smaller eigenvalue reaches ``eig_th`` get the full solution.
    With ``include_normal_flow``, pixels where only the larger eigenvalue does
    get the flow projected on its eigenvector. Everything else, and every
    pixel with row or column below ``half_window``, is zero.
    """
    xx, yy, xy, xt, yt = tensor.xx, tensor.yy, tensor.xy, tensor.xt, tensor.yt
    dtype = xx.dtype
    th = dtype.type(eig_th)

    vel_col = np.zeros_like(xx)
    vel_row = np.zeros_like(xx)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        delta = xy * xy - xx * yy
        a = (xx + yy) / dtype.type(2)
        diff = xx - yy
        b = dtype.type(4) * xy * xy + diff * diff
        sqrt_b_by_2 = np.sqrt(b) / dtype.type(2)
        eig1 = a + sqrt_b_by_2
        eig2 = a - sqrt_b_by_2

        delta_x = -(yt * xy - xt * yy)
        delta_y = -(xy * xt - xx * yt)
        inv_delta = dtype.type(1) / delta
        vel_re = delta_x * inv_delta
        vel_im = delta_y * inv_delta

        inside = np.zeros(xx.shape, dtype=bool)
        inside[half_window:, half_window:] = True

        full = inside & (eig2 >= th) & (delta < 0)
        vel_col[full] = vel_re[full]
        vel_row[full] = vel_im[full]

        if include_normal_flow:
            normal = inside & ~full & (eig1 >= th) & (np.abs(delta) > dtype.type(THRESH_ABS_DELTA))
            if normal.any():
                n_xx = xx[normal]
                n_xy = xy[normal]
                n_eig1 = eig1[normal]
                d = n_xx - n_eig1
                m_factor = dtype.type(1) / np.sqrt(d * d + n_xy * n_xy)
                eig_vec0 = n_xy * m_factor
                eig_vec1 = (n_eig1 - n_xx) * m_factor
                tmp_vel = -(vel_re[normal] * eig_vec0 + vel_im[normal] * eig_vec1)
                vel_col[normal] = tmp_vel * eig_vec1
                vel_row[normal] = tmp_vel * eig_vec0

    return vel_col, vel_row


def _check_frames(frames: Sequence[np.ndarray]) -> list[np.ndarray]:
    if len(frames) == 0:
        raise ValueError("frames must not be empty")
    arrs = [np.asarray(f) for f in frames]
    first = arrs[0]
    if first.ndim != 2:
        raise ValueError(f"frames must be 2-D, got shape {first.shape}")
    if first.dtype not in SUPPORTED_DTYPES:
        raise ValueError(f"Unsupported frame dtype {first.dtype}; use uint8, float32 or float64")
    for arr in arrs[1:]:
        if arr.shape != first.shape:
            raise ValueError(f"Frame shape mismatch: {arr.shape} vs {first.shape}")
        if arr.dtype != first.dtype:
            raise ValueError(f"Frame dtype mismatch: {arr.dtype} vs {first.dtype}")
    return arrs


def compute_dtype(frame_dtype) -> np.dtype:
    """float64 frames compute in float64; uint8 and float32 in float32."""
    if np.dtype(frame_dtype) == np.float64:
        return np.dtype(np.float64)
    return np.dtype(np.float32)


def compute_flow(
    frames: Sequence[np.ndarray],
    kernels: KernelSet,
    eig_th: float,
    include_normal_flow: bool = False,
    return_tensor: bool = False,
):
    """
    Estimate flow for the middle frame of a newest-first frame stack.

    Returns ``(vel_col, vel_row)``, plus the smoothed ``StructureTensor`` when
    ``return_tensor`` is set.
    """
    arrs = _check_frames(frames)
    dtype = compute_dtype(arrs[0].dtype)
    k = kernels.astype(dtype)
    for name in ("t_kernel", "t_grad_kernel", "s_kernel", "s_grad_kernel", "w_kernel"):
        taps = getattr(k, name)
        if taps.ndim != 1 or taps.size == 0:
            raise ValueError(f"{name} must be a non-empty 1-D array")

    tensor = build_structure_tensor(arrs, k, dtype)
    vel_col, vel_row = solve_flow(tensor, eig_th, k.half_window, include_normal_flow)
    if return_tensor:
        return vel_col, vel_row, tensor
    return vel_col, vel_row
