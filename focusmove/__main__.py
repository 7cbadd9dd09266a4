"""Allow running FocusMove as a module: python -m focusmove."""

import logging
import os
import sys

from PyQt6.QtWidgets import QApplication

from .app import FocusMoveApp


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("FOCUSMOVE_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)
    app.setApplicationName("FocusMove")
    app.setOrganizationName("FocusMove")
    app.setQuitOnLastWindowClosed(False)

    # Dock icon: generated accent circle placeholder
    from PyQt6.QtGui import QIcon, QPixmap, QPainter, QColor
    icon = QPixmap(256, 256)
    icon.fill(QColor(0, 0, 0, 0))
    p = QPainter(icon)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    p.setBrush(QColor("#F38BA8"))
    p.setPen(QColor("#F38BA8").darker(120))
    p.drawEllipse(16, 16, 224, 224)
    p.end()
    app.setWindowIcon(QIcon(icon))

    window = FocusMoveApp()
    window.show()
    logging.getLogger(__name__).info("FocusMove ready")

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
