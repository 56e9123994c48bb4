from __future__ import annotations

import numpy as np

from lkflow.kernels import KernelSet
from lkflow.solver import compute_flow
from lkflow.tensor import build_structure_tensor, compute_derivatives, temporal_window


def _simple_kernels(t_kernel, t_grad_kernel):
    return KernelSet(
        t_kernel=np.asarray(t_kernel, dtype=np.float64),
        t_grad_kernel=np.asarray(t_grad_kernel, dtype=np.float64),
        s_kernel=np.full(3, 1.0 / 3.0),
        s_grad_kernel=np.array([0.5, 0.0, -0.5]),
        w_kernel=np.full(3, 1.0 / 3.0),
    )


def test_temporal_window_centering():
    assert temporal_window(3, 3) == (0, 0, 3)
    assert temporal_window(1, 5) == (2, 0, 5)
    assert temporal_window(5, 1) == (0, 2, 5)
    # odd difference: floor division keeps the known one-frame lean
    assert temporal_window(5, 2) == (0, 1, 5)
    assert temporal_window(2, 5) == (1, 0, 5)


def test_shorter_kernel_sees_centered_frames():
    frames = [np.full((6, 6), float(v)) for v in (10.0, 20.0, 30.0, 40.0, 50.0)]
    # temporal smoothing sees only the middle frame (30)
    kernels_id = _simple_kernels([1.0], [1.0, 0.0, 0.0, 0.0, -1.0])
    kernels_id.s_kernel = np.array([1.0])
    kernels_id.s_grad_kernel = np.array([1.0])
    dx, dy, dt = compute_derivatives(frames, kernels_id, np.float64)
    assert np.all(dx == 30.0)
    assert np.all(dy == 30.0)
    # oldest frame on the first tap, newest on the last
    assert np.all(dt == 50.0 - 10.0)


def test_derivative_axes():
    cols = np.arange(12, dtype=np.float64)
    ramp = np.tile(0.01 * cols, (10, 1))
    frames = [ramp, ramp]
    kernels = _simple_kernels([1.0, 0.0], [1.0, -1.0])
    dx, dy, dt = compute_derivatives(frames, kernels, np.float64)
    inner = (slice(2, -2), slice(2, -2))
    assert np.allclose(dx[inner], -0.01)
    assert np.allclose(dy[inner], 0.0, atol=1e-15)
    assert np.allclose(dt[inner], 0.0, atol=1e-15)


def test_constant_frames_zero_except_dy_margin_band():
    frames = [np.full((40, 40), 0.4), np.full((40, 40), 0.4)]
    kernels = KernelSet.from_parameters(3, 1.5, 1.0)
    kernels.t_kernel = np.array([0.5, 0.5])
    kernels.t_grad_kernel = np.array([-1.0, 1.0])

    dx, dy, dt = compute_derivatives(frames, kernels, np.float64)
    assert np.allclose(dx, 0.0, atol=1e-12)
    assert np.all(dt == 0.0)
    # dy is smoothed along columns first, which zeroes a 5-pixel margin on both
    # axes; the row derivative then sees that step in rows 5..9 and 30..34.
    assert np.allclose(dy[10:30, :], 0.0, atol=1e-12)
    assert np.abs(dy[5:10, 5:35]).max() > 1e-3
    assert np.abs(dy[30:35, 5:35]).max() > 1e-3
    outside = np.ones_like(dy, dtype=bool)
    outside[5:35, 5:35] = False
    assert np.all(dy[outside] == 0.0)

    tensor = build_structure_tensor(frames, kernels, np.float64)
    for buf in (tensor.xx, tensor.xy, tensor.xt, tensor.yt):
        assert buf.shape == (40, 40)
        assert np.allclose(buf, 0.0, atol=1e-12)
    assert np.all(tensor.xt == 0.0)
    assert np.all(tensor.yt == 0.0)
    assert tensor.yy.max() > 0.0

    vel_col, vel_row = compute_flow(frames, kernels, 0.0039)
    assert np.all(vel_col == 0.0)
    assert np.all(vel_row == 0.0)


def test_float32_stays_float32():
    rng = np.random.default_rng(0)
    frames = [rng.random((16, 16)).astype(np.float32) for _ in range(3)]
    kernels = KernelSet.from_parameters(3, 1.0, 1.0).astype(np.float32)
    tensor = build_structure_tensor(frames, kernels, np.float32)
    assert tensor.xx.dtype == np.float32
    assert np.all(tensor.xx >= 0.0)
    assert np.all(tensor.yy >= 0.0)
