import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from .compositor import OVERLAY_ALPHA, composite
from .imaging import (
    ALPHA_DEFAULT,
    FIXED_RANGE,
    HUE_RANGE,
    DisplayRange,
    check_alpha,
    estimate_range,
    ewma_update,
    map_hues,
    new_state,
)
from .record import N_CELLS, Sample, parse_record

logger = logging.getLogger(__name__)


@dataclass
class DisplayConfig:
    auto_scale: bool = True
    mirror: bool = False


@dataclass
class PipelineContext:
    """
    Everything that survives from one frame to the next.

    `state` is the smoothed 8x8 grid; it starts at zero and is only ever
    updated in place by an accepted sample. `display_range` is cached
    together with the scale mode it was computed for.
    """

    config: DisplayConfig = field(default_factory=DisplayConfig)
    alpha: float = ALPHA_DEFAULT
    fixed_range: Tuple[float, float] = FIXED_RANGE
    hue_range: Tuple[float, float] = HUE_RANGE
    overlay_alpha: float = OVERLAY_ALPHA

    state: np.ndarray = field(default_factory=new_state)
    display_range: Optional[DisplayRange] = None
    range_auto: Optional[bool] = None
    hue_grid: Optional[np.ndarray] = None
    last_sample: Optional[Sample] = None

    samples: int = 0
    rejected_cells: int = 0

    def __post_init__(self):
        self.alpha = check_alpha(self.alpha)
        if not 0.0 <= self.overlay_alpha <= 1.0:
            raise ValueError(f"overlay alpha must be in [0, 1], got {self.overlay_alpha}")
        lo, hi = self.fixed_range
        if hi < lo:
            raise ValueError(f"fixed range is inverted: {self.fixed_range}")


def update_range(ctx: PipelineContext, force: bool = False) -> DisplayRange:
    auto = ctx.config.auto_scale
    if force or ctx.display_range is None or ctx.range_auto != auto:
        ctx.display_range = estimate_range(ctx.state, auto, ctx.fixed_range)
        ctx.range_auto = auto
    return ctx.display_range


def process_line(ctx: PipelineContext, line: Optional[str]) -> bool:
    """Parse, filter and re-range for one input line; False if nothing was accepted."""
    sample = parse_record(line)
    if sample is None:
        return False
    ewma_update(ctx.state, sample, ctx.alpha)
    ctx.last_sample = sample
    ctx.samples += 1
    ctx.rejected_cells += N_CELLS - sample.n_valid
    update_range(ctx, force=True)
    return True


def render(ctx: PipelineContext, frame: Optional[np.ndarray], size: Tuple[int, int]) -> np.ndarray:
    rng = update_range(ctx)
    ctx.hue_grid = map_hues(ctx.state, rng, ctx.hue_range)
    return composite(
        frame, ctx.hue_grid, size, mirror=ctx.config.mirror, alpha=ctx.overlay_alpha
    )


class FrameLoop:
    """
    One call to `tick` is one displayed frame:

        1. take the newest video frame, or keep the previous one
        2. take at most one line from the sensor and run it through the filter
        3. map the smoothed grid to hues
        4. composite the grid over the frame

    Neither source may block; both are polled.
    """

    def __init__(self, ctx: PipelineContext, video, serial, size: Tuple[int, int]):
        self.ctx = ctx
        self.video = video
        self.serial = serial
        self.size = size
        self.last_frame: Optional[np.ndarray] = None
        self.last_image: Optional[np.ndarray] = None
        self.ticks = 0

    def tick(self) -> np.ndarray:
        frame = self.video.poll()
        if frame is not None:
            self.last_frame = frame

        line = self.serial.poll()
        if line is not None and not process_line(self.ctx, line):
            logger.debug("empty record skipped")

        self.last_image = render(self.ctx, self.last_frame, self.size)
        self.ticks += 1
        return self.last_image
