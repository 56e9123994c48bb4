from __future__ import annotations

import numpy as np
import pytest

import lkflow.estimator as estimator_mod
from lkflow import LKDoGEstimator, OpticalFlow
from lkflow.tensor import StructureTensor


def _texture(t: int, size: int = 64, shift_x: float = 1.0) -> np.ndarray:
    i, j = np.mgrid[0:size, 0:size].astype(np.float64)
    return 0.5 + 0.25 * (np.sin(0.5 * (j - shift_x * t)) + np.sin(0.4 * i))


def test_static_uint8_scene_has_no_flow():
    est = LKDoGEstimator()
    frame = np.full((48, 48), 100, dtype=np.uint8)
    for _ in range(4):
        flow = est.estimate_flow(frame)
    assert isinstance(flow, OpticalFlow)
    assert flow.vx.dtype == np.float32
    assert np.all(flow.vx == 0.0)
    assert np.all(flow.vy == 0.0)


def test_translation_to_the_right():
    est = LKDoGEstimator()
    for t in range(3):
        flow = est.estimate_flow(_texture(t))
    assert flow.vx.dtype == np.float64
    moving = flow.vx != 0.0
    assert moving.sum() > 0
    mean_vx = float(np.mean(flow.vx[moving]))
    mean_vy = float(np.mean(flow.vy[moving]))
    assert mean_vx > 0.0
    assert abs(mean_vy) < mean_vx


def test_delay_buffer_order(monkeypatch):
    seen = []

    def fake_compute_flow(stack, kernels, eig_th, include_normal_flow=False, return_tensor=False):
        seen.append([float(f[0, 0]) for f in stack])
        z = np.zeros(stack[0].shape)
        return z, z.copy(), StructureTensor(z, z, z, z, z)

    monkeypatch.setattr(estimator_mod, "compute_flow", fake_compute_flow)
    est = LKDoGEstimator(num_frames=5)
    for v in (1.0, 2.0, 3.0, 4.0, 5.0, 6.0):
        est.estimate_flow(np.full((4, 4), v))
    assert seen[0] == [1.0, 0.0, 0.0, 0.0, 0.0]
    assert seen[2] == [3.0, 2.0, 1.0, 0.0, 0.0]
    assert seen[5] == [6.0, 5.0, 4.0, 3.0, 2.0]

    est.reset()
    est.estimate_flow(np.full((4, 4), 9.0))
    assert seen[6] == [9.0, 0.0, 0.0, 0.0, 0.0]


def test_uint8_matches_single_precision_input():
    frames = [np.clip(np.rint(_texture(t, 48) * 255), 0, 255).astype(np.uint8) for t in range(3)]
    est_u8 = LKDoGEstimator()
    est_f32 = LKDoGEstimator()
    for f in frames:
        est_u8.estimate_flow(f)
        est_f32.estimate_flow(f.astype(np.float32) / np.float32(255))
    a = est_u8.last_tensor
    b = est_f32.last_tensor
    for name in ("xx", "yy", "xy", "xt", "yt"):
        assert np.allclose(getattr(a, name), getattr(b, name), rtol=1e-4, atol=1e-6)


@pytest.mark.parametrize(
    "image, expected",
    [
        (np.zeros((20, 20), dtype=np.float64), np.float64),
        (np.zeros((20, 20), dtype=np.float32), np.float32),
        (np.zeros((20, 20), dtype=np.uint8), np.float32),
        (np.zeros((20, 20), dtype=np.int16), np.float32),
        (np.zeros((20, 20), dtype=bool), np.float32),
    ],
)
def test_output_dtype(image, expected):
    flow = LKDoGEstimator().estimate_flow(image)
    assert flow.vx.dtype == expected
    assert flow.vy.dtype == expected
    assert flow.vx.shape == image.shape


def test_size_and_dtype_changes_rejected():
    est = LKDoGEstimator()
    est.estimate_flow(np.zeros((10, 12)))
    with pytest.raises(ValueError):
        est.estimate_flow(np.zeros((12, 10)))
    with pytest.raises(ValueError):
        est.estimate_flow(np.zeros((10, 12), dtype=np.float32))
    est.reset()
    flow = est.estimate_flow(np.zeros((12, 10), dtype=np.float32))
    assert flow.vx.shape == (12, 10)


def test_rejects_unsupported_images():
    est = LKDoGEstimator()
    with pytest.raises(ValueError):
        est.estimate_flow(np.zeros((4, 4, 3)))
    with pytest.raises(ValueError):
        est.estimate_flow(np.zeros((4, 4), dtype=np.int64))


def test_empty_image_returns_empty_flow():
    flow = LKDoGEstimator().estimate_flow(np.zeros((0, 5), dtype=np.uint8))
    assert flow.vx.shape == (0, 5)
    assert flow.vx.dtype == np.float32


def test_parameter_validation():
    with pytest.raises(ValueError):
        LKDoGEstimator(num_frames=4)
    with pytest.raises(ValueError):
        LKDoGEstimator(noise_threshold=0)
    with pytest.raises(ValueError):
        LKDoGEstimator(image_filter_sigma=float("nan"))
    est = LKDoGEstimator()
    with pytest.raises(ValueError):
        est.gradient_filter_sigma = -1.0
    with pytest.raises(ValueError):
        est.noise_threshold = "high"


def test_parameter_change_rebuilds_kernels_and_resets():
    est = LKDoGEstimator()
    est.estimate_flow(np.zeros((10, 10)))
    est.num_frames = 5
    assert len(est.kernels.t_kernel) == 5
    # history is gone, so a new size is accepted
    est.estimate_flow(np.zeros((8, 8), dtype=np.uint8))
    est.image_filter_sigma = 1.0
    assert len(est.kernels.s_kernel) == 7
