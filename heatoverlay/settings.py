import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Optional, Tuple

from .compositor import OVERLAY_ALPHA
from .imaging import ALPHA_DEFAULT, FIXED_RANGE, HUE_RANGE
from .sensor import BYTE_THRESHOLD

logger = logging.getLogger(__name__)

SETTINGS_FILE = "settings.json"


@dataclass
class OverlaySettings:
    serial_port: str = ""
    baud_rate: int = 115200
    camera_index: int = 0
    display_width: int = 640
    display_height: int = 480
    fps: int = 10
    alpha: float = ALPHA_DEFAULT
    fixed_min: float = FIXED_RANGE[0]
    fixed_max: float = FIXED_RANGE[1]
    hue_low: float = HUE_RANGE[0]
    hue_high: float = HUE_RANGE[1]
    overlay_alpha: float = OVERLAY_ALPHA
    byte_threshold: int = BYTE_THRESHOLD
    auto_scale: bool = True
    mirror: bool = False

    @property
    def display_size(self) -> Tuple[int, int]:
        return (int(self.display_width), int(self.display_height))

    @property
    def tick_ms(self) -> int:
        return max(1, int(round(1000.0 / max(1, self.fps))))

    @classmethod
    def from_dict(cls, data: dict) -> "OverlaySettings":
        out = cls()
        for f in fields(cls):
            if data.get(f.name) is None:
                continue
            default = getattr(out, f.name)
            if isinstance(default, bool) and not isinstance(data[f.name], bool):
                logger.warning("ignoring non-boolean setting %s=%r", f.name, data[f.name])
                continue
            try:
                setattr(out, f.name, type(default)(data[f.name]))
            except (TypeError, ValueError):
                logger.warning("ignoring bad setting %s=%r", f.name, data[f.name])
        return out


def default_settings_path(base_dir: Optional[str] = None) -> str:
    return os.path.join(base_dir or os.getcwd(), SETTINGS_FILE)


def load_settings(path: str) -> OverlaySettings:
    """Read settings from `path`; a missing or unreadable file gives defaults."""
    if not os.path.exists(path):
        return OverlaySettings()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error("cannot read settings %s: %s", path, e)
        return OverlaySettings()
    if not isinstance(data, dict):
        logger.error("settings %s: expected an object, got %s", path, type(data).__name__)
        return OverlaySettings()
    return OverlaySettings.from_dict(data)


def save_settings(path: str, settings: OverlaySettings) -> bool:
    tmp = path + ".tmp"
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(asdict(settings), f, indent=2)
        os.replace(tmp, path)
        return True
    except OSError as e:
        logger.error("cannot save settings %s: %s", path, e)
        try:
            if os.path.exists(tmp):
                os.remove(tmp)
        except OSError:
            pass
        return False
