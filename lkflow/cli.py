"""Command-line entrypoints for LKFlow."""
from __future__ import annotations

import argparse

from .constants import (
    DEFAULT_GRADIENT_FILTER_SIGMA,
    DEFAULT_IMAGE_FILTER_SIGMA,
    DEFAULT_NOISE_THRESHOLD,
    DEFAULT_NUM_FRAMES,
)
from .version import get_version_string
from .video import estimate_video_flow


def _add_flow_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", help="Input video path")
    parser.add_argument("output", help="Output .npz path")
    parser.add_argument(
        "--num-frames", type=int, default=DEFAULT_NUM_FRAMES, help="Frames per estimate (odd, 3..31)"
    )
    parser.add_argument(
        "--image-filter-sigma", type=float, default=DEFAULT_IMAGE_FILTER_SIGMA, help="Spatial Gaussian sigma"
    )
    parser.add_argument(
        "--gradient-filter-sigma",
        type=float,
        default=DEFAULT_GRADIENT_FILTER_SIGMA,
        help="Sigma of the window smoothing the gradient products",
    )
    parser.add_argument(
        "--noise-threshold", type=float, default=DEFAULT_NOISE_THRESHOLD, help="Eigenvalue threshold"
    )
    parser.add_argument(
        "--include-normal-flow", action="store_true", help="Report normal flow where only one eigenvalue passes"
    )
    parser.add_argument("--max-frames", type=int, default=None, help="Limit number of frames processed")
    parser.add_argument("--plot", default=None, help="Save a quiver plot of the last estimate to this path")
    parser.add_argument(
        "--decimation", type=int, nargs=2, default=[8, 8], metavar=("DX", "DY"), help="Quiver decimation"
    )
    parser.add_argument("--scale", type=int, default=1, help="Quiver vector scale factor")


def _run_estimate(args: argparse.Namespace) -> None:
    estimate_video_flow(
        args.input,
        args.output,
        num_frames=args.num_frames,
        image_filter_sigma=args.image_filter_sigma,
        gradient_filter_sigma=args.gradient_filter_sigma,
        noise_threshold=args.noise_threshold,
        include_normal_flow=args.include_normal_flow,
        max_frames=args.max_frames,
        plot_path=args.plot,
        decimation=tuple(args.decimation),
        scale=args.scale,
    )


def estimate_main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Lucas-Kanade (derivative of Gaussian) optical flow")
    _add_flow_arguments(parser)
    args = parser.parse_args(argv)
    try:
        _run_estimate(args)
    except ValueError as exc:
        parser.error(str(exc))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="LKFlow optical flow tools")
    parser.add_argument("--version", action="version", version=get_version_string())
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_est = sub.add_parser("estimate", help="Estimate flow for a video")
    _add_flow_arguments(p_est)

    args = parser.parse_args(argv)

    if args.cmd == "estimate":
        try:
            _run_estimate(args)
        except ValueError as exc:
            parser.error(str(exc))
    else:
        parser.error("Unknown command")


if __name__ == "__main__":
    main()
