# widgets/zoom_toolbar.py
"""
ZoomToolbar: zoom out / percentage / zoom in / reset for the selected photo.
"""
from PySide6.QtCore import Qt
from PySide6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QWidget

from ..controllers.session import CollageSessionController


class ZoomToolbar(QWidget):
    """Floating toolbar shown while a fitted photo is selected."""

    def __init__(self, session: CollageSessionController, parent=None):
        super().__init__(parent)
        self.session = session

        layout = QHBoxLayout(self)
        layout.setContentsMargins(8, 4, 8, 4)
        layout.setSpacing(6)

        self.zoom_out_btn = QPushButton("−")
        self.zoom_out_btn.setToolTip("Zoom out")
        self.zoom_out_btn.clicked.connect(lambda: self.session.zoom_step("out"))
        self.percent_label = QLabel("100%")
        self.percent_label.setAlignment(Qt.AlignCenter)
        self.percent_label.setMinimumWidth(48)
        self.zoom_in_btn = QPushButton("+")
        self.zoom_in_btn.setToolTip("Zoom in")
        self.zoom_in_btn.clicked.connect(lambda: self.session.zoom_step("in"))
        self.reset_btn = QPushButton("Reset")
        self.reset_btn.setToolTip("Fit the photo to the cell again")
        self.reset_btn.clicked.connect(self.session.reset_selected)

        for w in (self.zoom_out_btn, self.percent_label, self.zoom_in_btn, self.reset_btn):
            layout.addWidget(w)

        self.session.add_listener(self.refresh)
        self.refresh()

    def refresh(self) -> None:
        percentage = self.session.zoom_percentage()
        self.setVisible(percentage is not None)
        if percentage is not None:
            self.percent_label.setText(f"{percentage}%")
