"""Launcher for the thermal heat-map overlay.

Checks the display tunables, then resolves the camera and the sensor port,
all before any window is created. On the first failure the reason is
reported and the process exits.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional, Tuple

from PyQt5 import QtWidgets

from heatoverlay.backend import SourceUnavailableError, open_sources
from heatoverlay.settings import default_settings_path, load_settings
from heatoverlay.viewer import Viewer, context_from_settings

logger = logging.getLogger("heatmap_viewer")


def parse_size(text: str) -> Tuple[int, int]:
    try:
        w, h = (int(v) for v in text.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WxH, got {text!r}")
    if w < 8 or h < 8:
        raise argparse.ArgumentTypeError(f"display must be at least 8x8, got {text!r}")
    return w, h


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Overlay an 8x8 thermal sensor heat map on live video"
    )
    parser.add_argument("--port", help="serial port of the sensor (default: first found)")
    parser.add_argument("--baud", type=int, help="serial baud rate")
    parser.add_argument("--camera", type=int, help="OpenCV video device index")
    parser.add_argument("--size", type=parse_size, help="display size as WxH, e.g. 640x480")
    parser.add_argument("--fps", type=int, help="frame loop rate")
    parser.add_argument(
        "--settings",
        default=default_settings_path(os.path.dirname(os.path.abspath(__file__))),
        help="settings file (default: settings.json beside this script)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="logging verbosity (default: INFO)",
    )
    return parser


def apply_overrides(settings, args):
    if args.port:
        settings.serial_port = args.port
    if args.baud:
        settings.baud_rate = args.baud
    if args.camera is not None:
        settings.camera_index = args.camera
    if args.size:
        settings.display_width, settings.display_height = args.size
    if args.fps:
        settings.fps = max(1, args.fps)
    return settings


def main(argv: Optional[List[str]] = None):
    if argv is None:
        argv = sys.argv
    args, qt_args = build_arg_parser().parse_known_args(argv[1:])
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )

    settings = apply_overrides(load_settings(args.settings), args)
    try:
        ctx = context_from_settings(settings)
        video, serial = open_sources(settings)
    except (ValueError, SourceUnavailableError) as e:
        logger.critical("%s", e)
        print(f"Cannot start: {e}", file=sys.stderr)
        sys.exit(1)

    app = QtWidgets.QApplication([argv[0], *qt_args])
    w = Viewer(settings, args.settings, ctx, video, serial)
    w.show()
    w.start()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
