from typing import NamedTuple, Tuple

import cv2 as cv
import numpy as np

from .record import GRID_H, GRID_W, Sample

ALPHA_DEFAULT = 0.8  # weight on the new sample
FIXED_RANGE = (20.0, 40.0)  # sensor units
HUE_RANGE = (240.0, 360.0)  # degrees, blue -> red/magenta
SATURATION = 1.0
BRIGHTNESS = 1.0


class DisplayRange(NamedTuple):
    lo: float
    hi: float

    @property
    def span(self) -> float:
        return self.hi - self.lo


def new_state() -> np.ndarray:
    return np.zeros((GRID_H, GRID_W), dtype=np.float64)


def check_alpha(alpha: float) -> float:
    alpha = float(alpha)
    if not 0.0 < alpha <= 1.0:
        raise ValueError(f"smoothing factor must be in (0, 1], got {alpha}")
    return alpha


def ewma_update(state: np.ndarray, sample: Sample, alpha: float = ALPHA_DEFAULT) -> int:
    """
    Fold `sample` into the smoothed grid `state`, in place.

    Per valid cell: state = alpha*new + (1-alpha)*state. Invalid cells keep
    their previous value. Return the number of cells updated.
    """
    flat = state.reshape(-1)
    mask = sample.valid
    flat[mask] = alpha * sample.values[mask] + (1.0 - alpha) * flat[mask]
    return int(np.count_nonzero(mask))


def estimate_range(
    state: np.ndarray, auto_scale: bool, fixed: Tuple[float, float] = FIXED_RANGE
) -> DisplayRange:
    """
    Return the (lo, hi) used to normalise `state` for coloring.

    With `auto_scale` the range is mean -/+ one population standard deviation
    of the grid, which follows the scene rather than absolute temperature.
    Otherwise `fixed` is returned untouched.
    """
    if not auto_scale:
        lo, hi = fixed
        return DisplayRange(float(lo), float(hi))
    # huge readings may overflow to inf; map_hues treats that range as degenerate
    with np.errstate(over="ignore", invalid="ignore"):
        mean = float(np.mean(state))
        sdev = float(np.std(state))
    return DisplayRange(mean - sdev, mean + sdev)


def map_hues(
    state: np.ndarray,
    display_range: DisplayRange,
    hue_range: Tuple[float, float] = HUE_RANGE,
) -> np.ndarray:
    """
    Linearly remap every cell from `display_range` onto `hue_range`.

    Out-of-range cells are clamped to the ends of the gradient. A degenerate
    range (hi <= lo, or a span that overflowed to inf/nan) maps the whole
    grid to the low end of the gradient.
    """
    h_lo, h_hi = hue_range
    lo, hi = display_range
    if not np.isfinite(hi - lo) or hi <= lo:
        return np.full(state.shape, float(h_lo))
    relpos = (state - lo) / float(hi - lo)
    hues = h_lo + relpos * (h_hi - h_lo)
    return np.clip(hues, min(h_lo, h_hi), max(h_lo, h_hi))


def hues_to_bgr(
    hues: np.ndarray, saturation: float = SATURATION, value: float = BRIGHTNESS
) -> np.ndarray:
    """Return a (rows, cols, 3) uint8 BGR array for a grid of hues in degrees."""
    hsv = np.empty(hues.shape + (3,), dtype=np.float32)
    hsv[..., 0] = hues
    hsv[..., 1] = saturation
    hsv[..., 2] = value
    bgr = cv.cvtColor(hsv, cv.COLOR_HSV2BGR)
    return np.clip(bgr * 255.0 + 0.5, 0, 255).astype(np.uint8)


def to_u8(arr: np.ndarray, lo: float, hi: float) -> np.ndarray:
    if hi <= lo:
        hi = lo + 1.0
    arr = np.clip(arr, lo, hi)
    arr = (arr - lo) / (hi - lo) * 255.0
    return arr.astype(np.uint8)
