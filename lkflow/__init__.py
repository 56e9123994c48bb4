"""Lucas-Kanade optical flow with derivative-of-Gaussian filtering."""
from .constants import (
    AXIS_COL,
    AXIS_ROW,
    DEFAULT_GRADIENT_FILTER_SIGMA,
    DEFAULT_IMAGE_FILTER_SIGMA,
    DEFAULT_NOISE_THRESHOLD,
    DEFAULT_NUM_FRAMES,
)
from .convolution import convolve_spatial, convolve_temporal, filter_both_axes
from .estimator import LKDoGEstimator
from .flow import OpticalFlow
from .kernels import KernelSet
from .solver import compute_flow, solve_flow
from .tensor import StructureTensor, build_structure_tensor, compute_derivatives
from .version import __version__, get_version_string, get_build_meta

__all__ = [
    "AXIS_COL",
    "AXIS_ROW",
    "DEFAULT_GRADIENT_FILTER_SIGMA",
    "DEFAULT_IMAGE_FILTER_SIGMA",
    "DEFAULT_NOISE_THRESHOLD",
    "DEFAULT_NUM_FRAMES",
    "convolve_spatial",
    "convolve_temporal",
    "filter_both_axes",
    "LKDoGEstimator",
    "OpticalFlow",
    "KernelSet",
    "compute_flow",
    "solve_flow",
    "StructureTensor",
    "build_structure_tensor",
    "compute_derivatives",
    "get_version_string",
    "get_build_meta",
    "__version__",
]
