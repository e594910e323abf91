import logging
from typing import Optional

from serial import Serial, SerialException

from .record import LineFramer

logger = logging.getLogger(__name__)

# shortest complete record: 64 one-digit values, 63 commas and the CR
BYTE_THRESHOLD = 128


class SerialLineSource:
    """
    Non-blocking line reader on top of an open pyserial port.

    Only the bytes already waiting in the driver are read, so `poll` returns
    immediately; it hands back at most one CR-terminated line per call.
    """

    def __init__(self, port: Serial, threshold: int = BYTE_THRESHOLD, framer: Optional[LineFramer] = None):
        self.port = port
        self.threshold = max(1, int(threshold))
        self.framer = framer if framer is not None else LineFramer()
        self.lines_read = 0
        self.read_errors = 0
        self._failing = False

    @property
    def name(self) -> str:
        return str(getattr(self.port, "port", "?"))

    def poll(self) -> Optional[str]:
        try:
            waiting = self.port.in_waiting
            if waiting:
                self.framer.feed(self.port.read(waiting))
        except SerialException as e:
            self.read_errors += 1
            if not self._failing:
                logger.error("read from %s failed: %s", self.name, e)
                self._failing = True
            return None
        if self._failing:
            logger.info("%s readable again after %d failed reads", self.name, self.read_errors)
            self._failing = False
        if len(self.framer) < self.threshold:
            return None
        line = self.framer.next_line()
        if line is not None:
            self.lines_read += 1
        return line

    def close(self):
        self.framer.clear()
        try:
            self.port.close()
        except SerialException as e:
            logger.warning("closing %s: %s", self.name, e)
