from __future__ import annotations

import argparse
import json
import sys
import time
import tracemalloc
from pathlib import Path
from typing import Optional

try:
    import psutil
except ImportError:  # pragma: no cover
    psutil = None

from .constants import DEFAULT_NUM_FRAMES
from .version import get_build_meta
from .video import estimate_video_flow


def current_rss_mb() -> float:
    if psutil is None:
        return 0.0
    proc = psutil.Process()
    return proc.memory_info().rss / (1024 * 1024)


def run_profile(
    input_path: Path,
    out_dir: Path,
    num_frames: int = DEFAULT_NUM_FRAMES,
    max_frames: int | None = None,
) -> dict:
    out_dir.mkdir(parents=True, exist_ok=True)
    result = {}

    tracemalloc.start()
    rss_start = current_rss_mb()
    t0 = time.perf_counter()
    summary = estimate_video_flow(
        str(input_path), str(out_dir / "flow.npz"), num_frames=num_frames, max_frames=max_frames
    )
    elapsed = time.perf_counter() - t0
    rss_end = current_rss_mb()
    _, peak_size = tracemalloc.get_traced_memory()
    tracemalloc.stop()

    frames = summary["frames"]
    result["frames"] = frames
    result["size"] = [summary["height"], summary["width"]]
    result["num_frames"] = num_frames
    result["estimate_time_sec"] = elapsed
    result["estimate_fps"] = frames / elapsed if elapsed > 0 else 0.0
    result["rss_start_mb"] = rss_start
    result["rss_end_mb"] = rss_end
    result["tracemalloc_peak_bytes"] = peak_size
    result["psutil_available"] = psutil is not None

    result["env"] = {
        "python": sys.version,
        "platform": sys.platform,
        "git": get_build_meta()["git_hash"],
    }

    with open(out_dir / "profile.json", "w", encoding="utf-8") as f:
        json.dump(result, f, indent=2)
    return result


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Profile LKFlow flow estimation")
    parser.add_argument("--input", type=Path, required=True, help="Input video")
    parser.add_argument("--out", type=Path, required=True, help="Output directory for profile")
    parser.add_argument("--num-frames", type=int, default=DEFAULT_NUM_FRAMES, help="Frames per estimate")
    parser.add_argument("--max-frames", type=int, default=None, help="Limit number of frames processed")
    args = parser.parse_args(argv)

    res = run_profile(args.input, args.out, num_frames=args.num_frames, max_frames=args.max_frames)
    print(json.dumps(res, indent=2))


if __name__ == "__main__":
    main()
