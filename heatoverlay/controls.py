import logging
import operator
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

KEY_AUTO_SCALE = "a"
KEY_MIRROR = "m"

LABELS = {
    "auto_scale": "Auto scale",
    "mirror": "Mirror",
}


def toggle_message(parname: str, value: bool) -> str:
    return f"{LABELS.get(parname, parname)}: {'on' if value else 'off'}"


class KeyboardHandler:
    """
    Map single keys to flips of boolean fields on a config object.
    """

    def __init__(self, target, notify: Optional[Callable[[str], None]] = None):
        """
        target: object whose attributes are toggled (e.g. DisplayConfig)
        notify: called with a human-readable message after every toggle
        """
        self.target = target
        self.notify = notify
        self.actions: Dict[str, Tuple[str, Callable]] = {}
        self.triggers: Dict[str, Callable] = {}

    def register(self, key: str, parname: str, trigger: Optional[Callable] = None):
        """
        Associate `key` with toggling `parname` on the target.

        `trigger`, if given, is passed the updated value.
        """
        if not hasattr(self.target, parname):
            raise AttributeError(f"{type(self.target).__name__} has no field {parname!r}")
        self.actions[key] = (parname, operator.not_)
        if trigger is not None:
            self.triggers[key] = trigger

    def __call__(self, key: str) -> bool:
        """Apply the action bound to `key`; False if the key is not bound."""
        try:
            parname, func = self.actions[key]
        except KeyError:
            return False
        newval = func(getattr(self.target, parname))
        setattr(self.target, parname, newval)
        msg = toggle_message(parname, newval)
        logger.info(msg)
        if self.notify is not None:
            self.notify(msg)
        trigger = self.triggers.get(key)
        if trigger is not None:
            trigger(newval)
        return True


def display_keys(config, notify=None, on_change=None) -> KeyboardHandler:
    handler = KeyboardHandler(config, notify)
    handler.register(KEY_AUTO_SCALE, "auto_scale", on_change)
    handler.register(KEY_MIRROR, "mirror", on_change)
    return handler
