import logging
import threading
import time
from typing import Optional

import cv2 as cv
import numpy as np

logger = logging.getLogger(__name__)


class VideoSource:
    """
    Latest-frame holder for an OpenCV capture device.

    `VideoCapture.read` blocks until the camera delivers, so a daemon thread
    owned by this object does the reading and keeps only the newest frame.
    `poll` never waits: it returns a frame not seen before, or None.
    """

    def __init__(self, capture: cv.VideoCapture, name: str = "camera"):
        self.capture = capture
        self.name = name
        self._lock = threading.Lock()
        self._frame: Optional[np.ndarray] = None
        self._fresh = False
        self._running = False
        self._thread: Optional[threading.Thread] = None
        self.frames_grabbed = 0
        self.read_failures = 0

    def start(self):
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(target=self._grab_loop, name=f"grab-{self.name}", daemon=True)
        self._thread.start()

    def _grab_loop(self):
        try:
            while self._running:
                ok, frame = self.capture.read()
                if not ok or frame is None:
                    self.read_failures += 1
                    time.sleep(0.01)
                    continue
                with self._lock:
                    self._frame = frame
                    self._fresh = True
                self.frames_grabbed += 1
        finally:
            self._release()

    def poll(self) -> Optional[np.ndarray]:
        with self._lock:
            if not self._fresh:
                return None
            self._fresh = False
            return self._frame

    def _release(self):
        self.capture.release()
        logger.info("%s released after %d frames", self.name, self.frames_grabbed)

    def stop(self, timeout: float = 1.0):
        """
        Ask the grabber to finish. A running grabber releases the capture on
        its way out, so a read still in progress never sees it closed.
        """
        self._running = False
        thread, self._thread = self._thread, None
        if thread is None:
            self._release()
            return
        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning("%s: read still blocked after %.1fs, release deferred", self.name, timeout)
