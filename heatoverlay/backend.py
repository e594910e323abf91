import logging
from typing import List, Optional, Tuple

import cv2 as cv
from serial import Serial, SerialException
from serial.tools import list_ports

from .sensor import SerialLineSource
from .settings import OverlaySettings
from .video import VideoSource

logger = logging.getLogger(__name__)


class SourceUnavailableError(RuntimeError):
    """A video or sensor source could not be opened at startup."""


def list_serial_ports() -> List[str]:
    return [p.device for p in list_ports.comports()]


def resolve_serial_port(port: Optional[str] = None) -> str:
    """
    Return `port` if given, else the first serial port found on the system.
    """
    if port:
        return port
    ports = list_serial_ports()
    if not ports:
        raise SourceUnavailableError("no serial ports detected")
    logger.info("no serial port configured, using %s (of %s)", ports[0], ", ".join(ports))
    return ports[0]


def open_serial(port: str, baud: int, threshold: int) -> SerialLineSource:
    try:
        ser = Serial(port, baudrate=baud, timeout=0)
    except (SerialException, ValueError) as e:
        raise SourceUnavailableError(f"cannot open serial port {port}: {e}") from e
    try:
        ser.reset_input_buffer()
    except SerialException as e:
        ser.close()
        raise SourceUnavailableError(f"cannot reset serial port {port}: {e}") from e
    logger.info("sensor on %s @ %d baud", port, baud)
    return SerialLineSource(ser, threshold=threshold)


def open_video(index: int, size: Tuple[int, int]) -> VideoSource:
    cap = cv.VideoCapture(index)
    if not cap.isOpened():
        cap.release()
        raise SourceUnavailableError(f"cannot open video source {index}")
    w, h = size
    cap.set(cv.CAP_PROP_FRAME_WIDTH, w)
    cap.set(cv.CAP_PROP_FRAME_HEIGHT, h)
    logger.info(
        "video source %d opened at %dx%d",
        index,
        int(cap.get(cv.CAP_PROP_FRAME_WIDTH)),
        int(cap.get(cv.CAP_PROP_FRAME_HEIGHT)),
    )
    return VideoSource(cap, name=f"camera{index}")


def open_sources(settings: OverlaySettings) -> Tuple[VideoSource, SerialLineSource]:
    """
    Open the camera and the sensor port described by `settings`.

    Either both sources come back ready, or SourceUnavailableError is raised
    and nothing is left open.
    """
    video = open_video(settings.camera_index, settings.display_size)
    try:
        port = resolve_serial_port(settings.serial_port)
        serial = open_serial(port, settings.baud_rate, settings.byte_threshold)
    except SourceUnavailableError:
        video.stop()
        raise
    settings.serial_port = port
    return video, serial
