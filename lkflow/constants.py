"""Constants and defaults for Lucas-Kanade derivative-of-Gaussian flow."""

AXIS_ROW = 0  # filter along the row index (vertical, "y")
AXIS_COL = 1  # filter along the column index (horizontal, "x")

DEFAULT_NUM_FRAMES = 3  # includes the current frame
DEFAULT_IMAGE_FILTER_SIGMA = 1.5
DEFAULT_GRADIENT_FILTER_SIGMA = 1.0
DEFAULT_NOISE_THRESHOLD = 0.0039

MIN_NUM_FRAMES = 3
MAX_NUM_FRAMES = 31

# Normal flow is only reported where |det| exceeds this.
THRESH_ABS_DELTA = 1e-8 / 255

# Temporal sigma bounds, indexed by (num_frames - 3) // 2.
SIGMA_T_RANGE = (
    0.0139,
    0.124,
    0.347,
    0.680,
    1.124,
    1.680,
    2.166,
    2.499,
    2.833,
    3.166,
    3.499,
    3.833,
    4.166,
    4.499,
    4.833,
    5.166,
)
SIGMA_T_TUNING_FACTOR = 0.5

# Up to this many frames the derivative kernel spans the whole stack.
MAX_FRAMES_FULL_DERIVATIVE = 13
