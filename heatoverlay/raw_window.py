import numpy as np
from PyQt5 import QtCore, QtGui, QtWidgets

from .imaging import to_u8


def raw_sample_u8(sample) -> np.ndarray:
    """Grayscale 8x8 image of a raw sample, stretched over its valid cells."""
    grid = sample.grid()
    mask = sample.valid.reshape(grid.shape)
    out = np.zeros(grid.shape, dtype=np.uint8)
    if mask.any():
        vals = grid[mask]
        out[mask] = to_u8(vals, float(vals.min()), float(vals.max()))
    return np.ascontiguousarray(out)


class RawWindow(QtWidgets.QDialog):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Raw sensor grid (no smoothing)")
        self.setModal(False)
        self.setMinimumSize(320, 360)
        self.label = QtWidgets.QLabel()
        self.label.setAlignment(QtCore.Qt.AlignCenter)
        self.label.setStyleSheet("background:black")
        self.info = QtWidgets.QLabel("valid: -- / 64")
        self.scale_slider = QtWidgets.QSlider(QtCore.Qt.Horizontal)
        self.scale_slider.setMinimum(8)
        self.scale_slider.setMaximum(64)
        self.scale_slider.setValue(32)
        self.scale_slider.setToolTip("Scale x (nearest neighbor)")
        lay = QtWidgets.QVBoxLayout(self)
        lay.addWidget(self.label)
        lay.addWidget(self.info)
        lay.addWidget(self.scale_slider)
        self.timer = QtCore.QTimer(self)
        self.timer.setInterval(100)
        self.timer.timeout.connect(self.refresh)
        self.timer.start()

    def refresh(self):
        par = self.parent()
        if par is None:
            return
        sample = par.ctx.last_sample
        if sample is None:
            return
        arr = raw_sample_u8(sample)
        h, w = arr.shape[:2]
        qimg = QtGui.QImage(
            arr.data, w, h, arr.strides[0], QtGui.QImage.Format_Grayscale8
        )
        pm = QtGui.QPixmap.fromImage(qimg)
        s = int(self.scale_slider.value())
        pm = pm.scaled(
            w * s, h * s, QtCore.Qt.IgnoreAspectRatio, QtCore.Qt.FastTransformation
        )
        self.label.setPixmap(pm)
        self.info.setText(f"valid: {sample.n_valid} / {sample.valid.size}")
