"""Optical flow result container."""
from __future__ import annotations

import matplotlib.pyplot as plt
import numpy as np


def _check_component(v, name: str) -> np.ndarray:
    arr = np.asarray(v)
    if arr.dtype not in (np.float32, np.float64):
        raise ValueError(f"{name} must be float32 or float64, got {arr.dtype}")
    if arr.ndim != 2:
        raise ValueError(f"{name} must be 2-D, got shape {arr.shape}")
    return arr


class OpticalFlow:
    """Velocity field with x (column) and y (row) components."""

    def __init__(self, vx: np.ndarray | None = None, vy: np.ndarray | None = None):
        if vx is None and vy is None:
            self._vx = np.zeros((0, 1))
            self._vy = np.zeros((0, 1))
            return
        if vx is None or vy is None:
            raise ValueError("OpticalFlow needs both vx and vy, or neither")
        vx = _check_component(vx, "vx")
        vy = _check_component(vy, "vy")
        if vx.shape != vy.shape:
            raise ValueError(f"vx/vy shape mismatch: {vx.shape} vs {vy.shape}")
        if vx.dtype != vy.dtype:
            raise ValueError(f"vx/vy dtype mismatch: {vx.dtype} vs {vy.dtype}")
        self._vx = vx
        self._vy = vy

    @property
    def vx(self) -> np.ndarray:
        return self._vx

    @property
    def vy(self) -> np.ndarray:
        return self._vy

    @property
    def orientation(self) -> np.ndarray:
        return np.arctan2(self._vy, self._vx)

    @property
    def magnitude(self) -> np.ndarray:
        return np.sqrt(self._vx * self._vx + self._vy * self._vy)

    def __repr__(self) -> str:
        return f"OpticalFlow(shape={self._vx.shape}, dtype={self._vx.dtype})"

    def plot(self, ax=None, decimation: tuple[int, int] = (1, 1), scale: int = 1):
        """
        Draw the field as a quiver plot.

        ``decimation`` is ``(x_step, y_step)``; vectors are multiplied by
        ``scale`` and drawn without auto-scaling. Returns the axes.
        """
        if len(decimation) != 2 or any(int(d) != d or d <= 0 for d in decimation):
            raise ValueError("decimation must be two positive integers")
        if int(scale) != scale or scale < 1:
            raise ValueError("scale must be an integer >= 1")
        x_step, y_step = int(decimation[0]), int(decimation[1])

        if ax is None:
            ax = plt.gca()
        rows, cols = self._vx.shape
        rv = np.arange(0, rows, y_step)
        cv = np.arange(0, cols, x_step)
        X, Y = np.meshgrid(cv, rv)
        u = self._vx[np.ix_(rv, cv)] * scale
        v = self._vy[np.ix_(rv, cv)] * scale
        ax.quiver(X.ravel(), Y.ravel(), u.ravel(), v.ravel(), angles="xy", scale_units="xy", scale=1)
        if not ax.yaxis_inverted():
            ax.invert_yaxis()
        ax.set_aspect("equal")
        return ax
