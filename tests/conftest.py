"""Shared fakes for the sensor link and the camera."""

from __future__ import annotations

from typing import Iterable, List, Optional

import numpy as np
import pytest


def record(values: Iterable) -> str:
    """Build one comma-separated record (without terminator)."""
    return ",".join(str(v) for v in values)


class FakePort:
    """Stands in for serial.Serial: bytes are queued by the test."""

    def __init__(self, port: str = "/dev/ttyFAKE0") -> None:
        self.port = port
        self.pending = bytearray()
        self.closed = False
        self.error: Optional[Exception] = None

    def push(self, data: bytes) -> None:
        self.pending += data

    @property
    def in_waiting(self) -> int:
        if self.error is not None:
            raise self.error
        return len(self.pending)

    def read(self, n: int) -> bytes:
        out = bytes(self.pending[:n])
        del self.pending[:n]
        return out

    def close(self) -> None:
        self.closed = True


class FakeLineSource:
    """Serial source stand-in that hands out scripted lines (None = nothing yet)."""

    def __init__(self, lines: List[Optional[str]]) -> None:
        self.lines = list(lines)
        self.name = "fake-serial"

    def poll(self) -> Optional[str]:
        return self.lines.pop(0) if self.lines else None


class FakeVideo:
    """Video source stand-in that hands out scripted frames (None = not ready)."""

    def __init__(self, frames: List[Optional[np.ndarray]]) -> None:
        self.frames = list(frames)
        self.name = "fake-camera"

    def poll(self) -> Optional[np.ndarray]:
        return self.frames.pop(0) if self.frames else None


class FakeCapture:
    """Minimal cv.VideoCapture replacement."""

    def __init__(self, opened: bool = True, frame: Optional[np.ndarray] = None) -> None:
        self.opened = opened
        self.frame = frame if frame is not None else np.zeros((4, 4, 3), np.uint8)
        self.released = False
        self.props = {}

    def isOpened(self) -> bool:
        return self.opened

    def read(self):
        import time

        time.sleep(0.002)
        return True, self.frame

    def set(self, prop, value) -> bool:
        self.props[prop] = value
        return True

    def get(self, prop) -> float:
        return float(self.props.get(prop, 0))

    def release(self) -> None:
        self.released = True


@pytest.fixture
def fake_port() -> FakePort:
    return FakePort()
