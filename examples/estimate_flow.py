"""CLI wrapper for the LKFlow video estimator."""
from __future__ import annotations

import argparse

from lkflow.video import estimate_video_flow


def main():
    parser = argparse.ArgumentParser(description="Lucas-Kanade (derivative of Gaussian) optical flow for a video")
    parser.add_argument("input", help="Input video path")
    parser.add_argument("output", help="Output .npz path")
    parser.add_argument("--num-frames", type=int, default=3, help="Frames per estimate (odd, 3..31)")
    parser.add_argument("--noise-threshold", type=float, default=0.0039, help="Eigenvalue threshold")
    parser.add_argument("--include-normal-flow", action="store_true", help="Keep normal flow on edges")
    parser.add_argument("--max-frames", type=int, default=None, help="Limit number of frames processed")
    parser.add_argument("--plot", default=None, help="Quiver plot of the last estimate")
    args = parser.parse_args()

    estimate_video_flow(
        args.input,
        args.output,
        num_frames=args.num_frames,
        noise_threshold=args.noise_threshold,
        include_normal_flow=args.include_normal_flow,
        max_frames=args.max_frames,
        plot_path=args.plot,
    )


if __name__ == "__main__":
    main()
