from PyQt5 import QtCore, QtGui, QtWidgets

from sysmon_helper import attach_sys_monitor

from .raw_window import RawWindow


class UIMixin:
    def _build_ui(self):
        central = QtWidgets.QWidget(self)
        self.setCentralWidget(central)
        root = QtWidgets.QVBoxLayout(central)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(0)

        # IMAGE
        self.image_label = QtWidgets.QLabel()
        self.image_label.setAlignment(QtCore.Qt.AlignCenter)
        self.image_label.setStyleSheet("background:black")
        self.image_label.setFixedSize(*self.render_size)
        self.image_label.setSizePolicy(
            QtWidgets.QSizePolicy.Fixed, QtWidgets.QSizePolicy.Fixed
        )
        root.addWidget(self.image_label, stretch=0)

        # INFO BAR
        self.info_range = QtWidgets.QLabel("range: -- .. --  |  auto: --  |  mirror: --")
        self.info_source = QtWidgets.QLabel(
            f"sensor: {self.serial.name}  |  video: {self.video.name}"
        )
        small_css = (
            "font-family: Consolas, 'Courier New', monospace; font-size: 11px; "
            "margin:0px; padding:0px;"
        )
        for _lbl in (self.info_range, self.info_source):
            _lbl.setStyleSheet(small_css)
            _lbl.setWordWrap(False)
            _lbl.setContentsMargins(0, 0, 0, 0)
            root.addWidget(_lbl, stretch=0)

        self.lbl_fps = QtWidgets.QLabel(f"FPS: 0.00 (target: {self.target_fps}, sensor: 0.00)")
        self.statusBar().addWidget(self.lbl_fps)
        attach_sys_monitor(self)
        self.statusBar().showMessage("keys: [a] auto scale  [m] mirror  [r] raw grid", 5000)

    def show_status(self, msg: str):
        self.statusBar().showMessage(msg, 3000)

    def keyPressEvent(self, event: QtGui.QKeyEvent):
        if event.key() == QtCore.Qt.Key_Escape:
            self.close()
            return
        key = event.text().lower()
        if key == "r":
            self.open_raw_window()
            return
        if not self.keys(key):
            super().keyPressEvent(event)

    def open_raw_window(self):
        if self.raw_win is None:
            self.raw_win = RawWindow(self)
        self.raw_win.show()
        self.raw_win.raise_()

    def mark_dirty(self, *args):
        self._save_debounce.start()

    def update_info(self):
        rng = self.ctx.display_range
        cfg = self.ctx.config
        rng_txt = "-- .. --" if rng is None else f"{rng.lo:.2f} .. {rng.hi:.2f}"
        self.info_range.setText(
            f"range: {rng_txt}  |  auto: {'on' if cfg.auto_scale else 'off'}"
            f"  |  mirror: {'on' if cfg.mirror else 'off'}"
        )
