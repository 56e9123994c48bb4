"""Frame loading helpers for LKFlow."""
from __future__ import annotations

import imageio.v2 as imageio
import numpy as np


def to_gray(frame: np.ndarray) -> np.ndarray:
    arr = np.asarray(frame)
    if arr.ndim == 2:
        return arr
    if arr.ndim == 3:
        if arr.shape[2] == 1:
            return arr[..., 0]
        if arr.shape[2] == 4:
            arr = arr[..., :3]
        if arr.shape[2] == 3:
            luma = (
                0.299 * arr[..., 0].astype(np.float64)
                + 0.587 * arr[..., 1].astype(np.float64)
                + 0.114 * arr[..., 2].astype(np.float64)
            )
            if arr.dtype == np.uint8:
                return np.clip(np.rint(luma), 0, 255).astype(np.uint8)
            return luma.astype(arr.dtype, copy=False)
    raise ValueError(f"Unsupported frame shape for grayscale conversion: {arr.shape}")


def iter_video_gray(path: str, max_frames: int | None = None):
    """Yield grayscale frames from a video or image sequence."""
    reader = imageio.get_reader(path)
    try:
        for idx, frame in enumerate(reader):
            if max_frames is not None and idx >= max_frames:
                break
            yield to_gray(frame)
    finally:
        close = getattr(reader, "close", None)
        if close is not None:
            close()


def load_video_gray(path: str, max_frames: int | None = None) -> np.ndarray:
    """
    Load a video file as grayscale frames with shape (T, H, W).
    """
    frames = list(iter_video_gray(path, max_frames=max_frames))
    if not frames:
        raise ValueError(f"No frames read from video: {path}")
    return np.stack(frames, axis=0)
