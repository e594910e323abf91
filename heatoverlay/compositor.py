from typing import Any, Iterator, Optional, Tuple

import cv2 as cv
import numpy as np

from .imaging import BRIGHTNESS, SATURATION, hues_to_bgr
from .record import GRID_H, GRID_W

OVERLAY_ALPHA = 0.5  # fixed translucency of the cell fill


def cell_rect(col: int, row: int, width: int, height: int) -> Tuple[int, int, int, int]:
    """
    Screen rectangle of sensor cell (col, row) as inclusive corners
    (x0, y0, x1, y1).

    Cell edges sit at round(col * width / 8), so the 64 cells always tile
    the full display even when its size is not a multiple of the grid.
    """
    cw = width / float(GRID_W)
    ch = height / float(GRID_H)
    x0 = int(round(col * cw))
    y0 = int(round(row * ch))
    x1 = int(round((col + 1) * cw)) - 1
    y1 = int(round((row + 1) * ch)) - 1
    return x0, y0, x1, y1


def grid_cells(
    grid: np.ndarray, width: int, height: int, mirror: bool = False
) -> Iterator[Tuple[int, int, int, int, Any]]:
    """
    Yield (x0, y0, x1, y1, grid[row, src_col]) for every screen cell, row by
    row.

    When mirrored, screen column `col` shows grid column 7 - col, matching
    the horizontally flipped video.
    """
    for row in range(GRID_H):
        for col in range(GRID_W):
            src_col = GRID_W - 1 - col if mirror else col
            x0, y0, x1, y1 = cell_rect(col, row, width, height)
            yield x0, y0, x1, y1, grid[row, src_col]


def prepare_frame(
    frame: Optional[np.ndarray], size: Tuple[int, int], mirror: bool = False
) -> np.ndarray:
    w, h = size
    if frame is None:
        return np.zeros((h, w, 3), dtype=np.uint8)
    if frame.ndim == 2:
        frame = cv.cvtColor(frame, cv.COLOR_GRAY2BGR)
    if frame.shape[1] != w or frame.shape[0] != h:
        frame = cv.resize(frame, (w, h), interpolation=cv.INTER_LINEAR)
    else:
        frame = frame.copy()
    if mirror:
        frame = cv.flip(frame, 1)
    return frame


def composite(
    frame: Optional[np.ndarray],
    hue_grid: np.ndarray,
    size: Tuple[int, int],
    mirror: bool = False,
    alpha: float = OVERLAY_ALPHA,
    saturation: float = SATURATION,
    value: float = BRIGHTNESS,
) -> np.ndarray:
    """
    Draw the video frame, then the 8x8 heat grid over it.

    The frame is resized to `size` (w, h) and flipped when `mirror` is set;
    the grid is drawn with the same mirroring so both layers line up. Cells
    are filled on a copy of the frame which is then blended back with the
    fixed translucency `alpha`. The whole image is redrawn on every call.
    """
    w, h = size
    base = prepare_frame(frame, size, mirror)
    colors = hues_to_bgr(hue_grid, saturation, value)
    layer = base.copy()
    for x0, y0, x1, y1, bgr in grid_cells(colors, w, h, mirror):
        color = tuple(int(c) for c in bgr)
        cv.rectangle(layer, (x0, y0), (x1, y1), color, thickness=-1)
    return cv.addWeighted(layer, alpha, base, 1.0 - alpha, 0)
