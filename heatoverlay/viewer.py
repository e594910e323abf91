import logging
import time
from dataclasses import replace

from PyQt5 import QtCore, QtGui, QtWidgets

from .controls import display_keys
from .pipeline import DisplayConfig, FrameLoop, PipelineContext
from .settings import OverlaySettings, save_settings
from .ui import UIMixin

logger = logging.getLogger(__name__)


def context_from_settings(settings: OverlaySettings) -> PipelineContext:
    return PipelineContext(
        config=DisplayConfig(auto_scale=settings.auto_scale, mirror=settings.mirror),
        alpha=settings.alpha,
        fixed_range=(settings.fixed_min, settings.fixed_max),
        hue_range=(settings.hue_low, settings.hue_high),
        overlay_alpha=settings.overlay_alpha,
    )


class Viewer(UIMixin, QtWidgets.QMainWindow):
    def __init__(self, settings: OverlaySettings, settings_path: str, ctx: PipelineContext, video, serial):
        super().__init__()

        self.settings = settings
        self.settings_path = settings_path
        self.video = video
        self.serial = serial

        self.ctx = ctx
        self.render_size = settings.display_size
        self.target_fps = settings.fps
        self.loop = FrameLoop(self.ctx, video, serial, self.render_size)
        self.keys = display_keys(self.ctx.config, self.show_status, self.mark_dirty)

        self.raw_win = None
        self.frame_count = 0
        self.last_fps_time = time.time()
        self.current_fps = 0.0
        self.sensor_fps = 0.0
        self._last_samples = 0

        self.setWindowTitle("Thermal Overlay")

        self._save_debounce = QtCore.QTimer(self)
        self._save_debounce.setSingleShot(True)
        self._save_debounce.setInterval(150)
        self._save_debounce.timeout.connect(self.save_settings)

        self._build_ui()

        self.timer = QtCore.QTimer(self)
        self.timer.setInterval(settings.tick_ms)
        self.timer.timeout.connect(self.tick)

    def start(self):
        self.video.start()
        self.timer.start()
        logger.info("frame loop started at %d ms per tick", self.timer.interval())

    def tick(self):
        vis = self.loop.tick()
        qimg = QtGui.QImage(
            vis.data,
            vis.shape[1],
            vis.shape[0],
            vis.strides[0],
            QtGui.QImage.Format_BGR888,
        )
        self.image_label.setPixmap(QtGui.QPixmap.fromImage(qimg))
        self.update_info()

        self.frame_count += 1
        now = time.time()
        if now - self.last_fps_time >= 1.0:
            dt = now - self.last_fps_time
            self.current_fps = self.frame_count / dt
            self.sensor_fps = (self.ctx.samples - self._last_samples) / dt
            self._last_samples = self.ctx.samples
            self.frame_count = 0
            self.last_fps_time = now
            self.lbl_fps.setText(
                f"FPS: {self.current_fps:.2f} (target: {self.target_fps}, sensor: {self.sensor_fps:.2f})"
            )

    def save_settings(self) -> bool:
        cfg = self.ctx.config
        self.settings = replace(self.settings, auto_scale=cfg.auto_scale, mirror=cfg.mirror)
        return save_settings(self.settings_path, self.settings)

    def closeEvent(self, event):
        self.timer.stop()
        self.video.stop()
        self.serial.close()
        self.save_settings()
        logger.info(
            "stopped after %d ticks, %d samples, %d rejected cells",
            self.loop.ticks,
            self.ctx.samples,
            self.ctx.rejected_cells,
        )
        super().closeEvent(event)
