# sysmon_helper.py
# Attach a CPU/RAM label to the viewer's status bar and refresh it once a second.
import logging

import psutil
from PyQt5 import QtCore, QtWidgets

logger = logging.getLogger(__name__)


def format_usage(cpu_percent: float, rss_bytes: int, cpu_count: int) -> str:
    cpu = cpu_percent / max(1, cpu_count)
    mem_mb = rss_bytes / (1024 * 1024.0)
    return f"CPU (app): {cpu:.1f}% | RAM: {mem_mb:.1f} MB"


def attach_sys_monitor(viewer: QtWidgets.QMainWindow, interval_ms: int = 1000):
    """Add 'CPU (app): x% | RAM: y MB' to the status bar of `viewer`.

    Call once after the status bar exists. The label and timer are kept on the
    viewer so they live as long as the window.
    """
    lbl = QtWidgets.QLabel("CPU: --% | RAM: -- MB")
    viewer.statusBar().addPermanentWidget(lbl)
    viewer._sysmon_lbl = lbl

    proc = psutil.Process()
    proc.cpu_percent(None)  # prime
    viewer._sysmon_proc = proc
    cpu_count = psutil.cpu_count(logical=True) or 1

    def _tick():
        try:
            lbl.setText(
                format_usage(proc.cpu_percent(None), proc.memory_info().rss, cpu_count)
            )
        except psutil.Error as e:
            logger.debug("sysmon: %s", e)

    t = QtCore.QTimer(viewer)
    t.setInterval(interval_ms)
    t.timeout.connect(_tick)
    t.start()
    viewer._sysmon_timer = t
