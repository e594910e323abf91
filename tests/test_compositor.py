"""Tests for laying the hue grid over the video frame."""

from __future__ import annotations

import numpy as np
import pytest

from heatoverlay.compositor import cell_rect, composite, grid_cells, prepare_frame

BLUE = (255, 0, 0)
RED = (0, 0, 255)


def marked_grid() -> np.ndarray:
    """All blue except column 0, which is red."""
    hues = np.full((8, 8), 240.0)
    hues[:, 0] = 360.0
    return hues


# ============================================================================
# Geometry
# ============================================================================


class TestCellRect:
    """Tests for cell -> screen rectangle mapping."""

    def test_divisible_size(self) -> None:
        assert cell_rect(0, 0, 640, 480) == (0, 0, 79, 59)
        assert cell_rect(7, 7, 640, 480) == (560, 420, 639, 479)
        assert cell_rect(2, 3, 640, 480) == (160, 180, 239, 239)

    @pytest.mark.parametrize("width", [100, 333, 641])
    def test_cells_tile_whole_width(self, width: int) -> None:
        """Cells are contiguous and end at the last pixel."""
        x_next = 0
        for col in range(8):
            x0, _, x1, _ = cell_rect(col, 0, width, 80)
            assert x0 == x_next
            assert x1 >= x0
            x_next = x1 + 1
        assert x_next == width


class TestGridCells:
    """Tests for the drawing order and mirroring of cells."""

    def test_sixty_four_cells(self) -> None:
        assert len(list(grid_cells(np.zeros((8, 8)), 80, 80))) == 64

    def test_unmirrored_column_zero_is_leftmost(self) -> None:
        cells = [c for c in grid_cells(marked_grid(), 80, 80) if c[4] == 360.0]
        assert {c[0] for c in cells} == {0}

    def test_mirrored_column_zero_is_rightmost(self) -> None:
        """With mirror on, grid column 0 is drawn in the last screen column."""
        cells = [c for c in grid_cells(marked_grid(), 80, 80, mirror=True) if c[4] == 360.0]
        assert len(cells) == 8
        assert {c[0] for c in cells} == {70}
        assert {c[2] for c in cells} == {79}


# ============================================================================
# Frame handling
# ============================================================================


class TestPrepareFrame:
    """Tests for resizing and mirroring the video background."""

    def test_missing_frame_is_black(self) -> None:
        out = prepare_frame(None, (32, 24))
        assert out.shape == (24, 32, 3)
        assert not out.any()

    def test_resized_to_display(self) -> None:
        out = prepare_frame(np.zeros((10, 20, 3), np.uint8), (64, 48))
        assert out.shape == (48, 64, 3)

    def test_gray_frame_becomes_bgr(self) -> None:
        out = prepare_frame(np.full((48, 64), 9, np.uint8), (64, 48))
        assert out.shape == (48, 64, 3)
        assert (out == 9).all()

    def test_mirror_flips_horizontally(self) -> None:
        frame = np.zeros((8, 16, 3), np.uint8)
        frame[:, :8] = 255
        out = prepare_frame(frame, (16, 8), mirror=True)
        assert not out[:, :8].any()
        assert (out[:, 8:] == 255).all()

    def test_source_frame_not_modified(self) -> None:
        frame = np.zeros((8, 16, 3), np.uint8)
        frame[:, :8] = 255
        prepare_frame(frame, (16, 8), mirror=True)
        assert (frame[:, :8] == 255).all()


class TestComposite:
    """Tests for the blended output image."""

    def test_opaque_overlay_colors(self) -> None:
        out = composite(None, marked_grid(), (80, 80), alpha=1.0)
        assert tuple(out[5, 5]) == RED
        assert tuple(out[5, 75]) == BLUE

    def test_mirror_moves_marked_column_right(self) -> None:
        out = composite(None, marked_grid(), (80, 80), mirror=True, alpha=1.0)
        assert tuple(out[5, 75]) == RED
        assert tuple(out[5, 5]) == BLUE

    def test_transparent_overlay_shows_video(self) -> None:
        frame = np.full((80, 80, 3), 77, np.uint8)
        out = composite(frame, marked_grid(), (80, 80), alpha=0.0)
        assert (out == 77).all()

    def test_half_translucency_blends(self) -> None:
        out = composite(None, np.full((8, 8), 240.0), (16, 16), alpha=0.5)
        b, g, r = (int(v) for v in out[0, 0])
        assert 126 <= b <= 129
        assert g == 0 and r == 0

    def test_output_matches_display_size(self) -> None:
        out = composite(np.zeros((30, 40, 3), np.uint8), marked_grid(), (123, 77))
        assert out.shape == (77, 123, 3)
