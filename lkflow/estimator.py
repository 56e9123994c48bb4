"""Frame-by-frame LK (derivative of Gaussian) flow estimator with a delay buffer."""
from __future__ import annotations

import math
from collections import deque

import numpy as np

from .constants import (
    DEFAULT_GRADIENT_FILTER_SIGMA,
    DEFAULT_IMAGE_FILTER_SIGMA,
    DEFAULT_NOISE_THRESHOLD,
    DEFAULT_NUM_FRAMES,
)
from .flow import OpticalFlow
from .kernels import KernelSet, check_num_frames
from .solver import compute_dtype, compute_flow
from .tensor import StructureTensor


def _check_positive(value: float, name: str) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a real scalar, got {value!r}") from exc
    if not math.isfinite(v) or v <= 0:
        raise ValueError(f"{name} must be finite and > 0, got {value!r}")
    return v


def to_single(image: np.ndarray) -> np.ndarray:
    """Convert an image to float32 in [0, 1] the way intensity images are rescaled."""
    arr = np.asarray(image)
    if arr.dtype == np.float32:
        return arr
    if arr.dtype == np.bool_:
        return arr.astype(np.float32)
    if arr.dtype == np.uint8:
        return arr.astype(np.float32) / np.float32(255)
    if arr.dtype == np.int16:
        return (arr.astype(np.float32) + np.float32(32768)) / np.float32(65535)
    if arr.dtype == np.float64:
        return arr.astype(np.float32)
    raise ValueError(f"Unsupported image dtype {arr.dtype}")


class LKDoGEstimator:
    """
    Estimate optical flow one frame at a time.

    Each call pushes the new frame into a delay line of ``num_frames - 1``
    previous frames and reports the flow of the middle frame of the stack,
    so results lag the input by ``num_frames // 2`` frames. The delay line
    starts zero-filled.
    """

    def __init__(
        self,
        num_frames: int = DEFAULT_NUM_FRAMES,
        image_filter_sigma: float = DEFAULT_IMAGE_FILTER_SIGMA,
        gradient_filter_sigma: float = DEFAULT_GRADIENT_FILTER_SIGMA,
        noise_threshold: float = DEFAULT_NOISE_THRESHOLD,
        include_normal_flow: bool = False,
    ):
        self._num_frames = check_num_frames(num_frames)
        self._image_filter_sigma = _check_positive(image_filter_sigma, "image_filter_sigma")
        self._gradient_filter_sigma = _check_positive(gradient_filter_sigma, "gradient_filter_sigma")
        self.noise_threshold = noise_threshold
        self.include_normal_flow = bool(include_normal_flow)
        self.last_tensor: StructureTensor | None = None
        self._rebuild_kernels()

    # -- parameters --------------------------------------------------------

    @property
    def num_frames(self) -> int:
        return self._num_frames

    @num_frames.setter
    def num_frames(self, value: int) -> None:
        self._num_frames = check_num_frames(value)
        self._rebuild_kernels()

    @property
    def image_filter_sigma(self) -> float:
        return self._image_filter_sigma

    @image_filter_sigma.setter
    def image_filter_sigma(self, value: float) -> None:
        self._image_filter_sigma = _check_positive(value, "image_filter_sigma")
        self._rebuild_kernels()

    @property
    def gradient_filter_sigma(self) -> float:
        return self._gradient_filter_sigma

    @gradient_filter_sigma.setter
    def gradient_filter_sigma(self, value: float) -> None:
        self._gradient_filter_sigma = _check_positive(value, "gradient_filter_sigma")
        self._rebuild_kernels()

    @property
    def noise_threshold(self) -> float:
        return self._noise_threshold

    @noise_threshold.setter
    def noise_threshold(self, value: float) -> None:
        self._noise_threshold = _check_positive(value, "noise_threshold")

    @property
    def kernels(self) -> KernelSet:
        return self._kernels

    def _rebuild_kernels(self) -> None:
        self._kernels = KernelSet.from_parameters(
            self._num_frames, self._image_filter_sigma, self._gradient_filter_sigma
        )
        self.reset()

    # -- state -------------------------------------------------------------

    def reset(self) -> None:
        """Forget frame history, size and data type."""
        self._first_call = True
        self._shape: tuple[int, int] | None = None
        self._in_dtype: np.dtype | None = None
        self._delay: deque[np.ndarray] = deque(maxlen=self._num_frames - 1)

    def _prepare(self, image) -> np.ndarray:
        arr = np.asarray(image)
        if arr.ndim != 2:
            raise ValueError(f"image must be 2-D, got shape {arr.shape}")
        if arr.dtype not in (np.uint8, np.int16, np.float64, np.float32, np.bool_):
            raise ValueError(f"Unsupported image dtype {arr.dtype}")

        if self._first_call:
            self._shape = arr.shape
            self._in_dtype = arr.dtype
        else:
            if arr.shape != self._shape:
                raise ValueError(f"Image size changed from {self._shape} to {arr.shape}; call reset() first")
            if arr.dtype != self._in_dtype:
                raise ValueError(f"Image dtype changed from {self._in_dtype} to {arr.dtype}; call reset() first")

        if arr.dtype in (np.float64, np.uint8):
            return arr
        return to_single(arr)

    def estimate_flow(self, image) -> OpticalFlow:
        frame = self._prepare(image)
        out_dtype = compute_dtype(frame.dtype)

        if frame.size == 0:
            zeros = np.zeros(frame.shape, dtype=out_dtype)
            return OpticalFlow(zeros, zeros.copy())

        if self._first_call:
            for _ in range(self._num_frames - 1):
                self._delay.append(np.zeros_like(frame))
            self._first_call = False

        stack = [frame, *self._delay]
        vel_col, vel_row, tensor = compute_flow(
            stack,
            self._kernels,
            self._noise_threshold,
            include_normal_flow=self.include_normal_flow,
            return_tensor=True,
        )
        self.last_tensor = tensor
        self._delay.appendleft(frame.copy())
        return OpticalFlow(vel_col, vel_row)
