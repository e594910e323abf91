import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)

GRID_W, GRID_H = 8, 8  # sensor cells
N_CELLS = GRID_W * GRID_H

LINE_TERMINATOR = b"\r"
MAX_BACKLOG = 64 * 1024  # bytes


@dataclass(frozen=True, eq=False)
class Sample:
    """
    One parsed record: 64 readings in row-major order (index = col + row*8)
    plus a mask telling which of them parsed to a finite number.

    Cells whose mask is False carry 0.0 and must not be used.
    """

    values: np.ndarray
    valid: np.ndarray

    @property
    def n_valid(self) -> int:
        return int(np.count_nonzero(self.valid))

    def grid(self) -> np.ndarray:
        return self.values.reshape(GRID_H, GRID_W)


def _to_float(token: str) -> Optional[float]:
    try:
        val = float(token)
    except ValueError:
        return None
    if not math.isfinite(val):
        return None
    return val


def parse_record(line: Optional[str]) -> Optional[Sample]:
    """
    Turn one text line into a Sample, or None when there is nothing to parse.

    Bad tokens do not reject the line; they clear the corresponding bit of
    the validity mask. Missing trailing tokens are invalid cells, tokens
    past the 64th are ignored.
    """
    if line is None:
        return None
    line = line.strip()
    if not line:
        return None

    tokens = line.split(",")
    if len(tokens) != N_CELLS:
        logger.debug("record has %d tokens, expected %d", len(tokens), N_CELLS)

    values = np.zeros(N_CELLS, dtype=np.float64)
    valid = np.zeros(N_CELLS, dtype=bool)
    for i, tok in enumerate(tokens[:N_CELLS]):
        val = _to_float(tok.strip())
        if val is None:
            logger.debug("cell %d: unusable token %r", i, tok)
            continue
        values[i] = val
        valid[i] = True

    values.setflags(write=False)
    valid.setflags(write=False)
    return Sample(values, valid)


class LineFramer:
    """
    Accumulate raw bytes from the sensor link and hand out complete lines.

    Usage:

        framer = LineFramer()
        framer.feed(port.read(port.in_waiting))
        line = framer.next_line()   # None until a CR has arrived
    """

    def __init__(self, terminator: bytes = LINE_TERMINATOR, max_backlog: int = MAX_BACKLOG):
        self.terminator = terminator
        self.max_backlog = max_backlog
        self.buf = bytearray()

    def __len__(self):
        return len(self.buf)

    def feed(self, data: bytes):
        if not data:
            return
        self.buf += data
        overflow = len(self.buf) - self.max_backlog
        if overflow > 0:
            # drop whole lines where possible so the next record stays aligned
            cut = self.buf.find(self.terminator, overflow)
            cut = overflow if cut < 0 else cut + len(self.terminator)
            del self.buf[:cut]
            logger.warning("serial backlog over %d bytes, dropped %d", self.max_backlog, cut)

    def next_line(self) -> Optional[str]:
        ix = self.buf.find(self.terminator)
        if ix < 0:
            return None
        raw = bytes(self.buf[:ix])
        del self.buf[: ix + len(self.terminator)]
        return raw.decode("ascii", errors="replace")

    def clear(self):
        self.buf.clear()
