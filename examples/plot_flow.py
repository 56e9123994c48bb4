"""Show a quiver plot from a saved .npz flow file."""
from __future__ import annotations

import argparse

import matplotlib.pyplot as plt
import numpy as np

from lkflow import OpticalFlow


def main():
    parser = argparse.ArgumentParser(description="Plot one frame of an LKFlow .npz file")
    parser.add_argument("input", help="Input .npz path")
    parser.add_argument("--frame", type=int, default=-1, help="Frame index")
    parser.add_argument("--decimation", type=int, nargs=2, default=[8, 8], metavar=("DX", "DY"))
    parser.add_argument("--scale", type=int, default=10, help="Vector scale factor")
    args = parser.parse_args()

    with np.load(args.input) as data:
        flow = OpticalFlow(data["vx"][args.frame], data["vy"][args.frame])
    flow.plot(decimation=tuple(args.decimation), scale=args.scale)
    plt.show()


if __name__ == "__main__":
    main()
