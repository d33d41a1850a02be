"""Application entry point for Odd One Out."""

import logging
import sys

from PySide6.QtGui import QFont, QGuiApplication
from PySide6.QtWidgets import QApplication

from oddoneout.core.catalog import default_catalog
from oddoneout.core.controller import GameController
from oddoneout.core.storage import StorageGateway
from oddoneout.ui.main_window import MainWindow


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def configure_emoji_font(app: QApplication) -> None:
    """Prefer colour emoji fonts so tiles render on every platform."""
    font = QFont(app.font())
    font.setFamilies(
        [
            font.family(),
            "Noto Color Emoji",  # Linux (common)
            "Segoe UI Emoji",  # Windows
            "Apple Color Emoji",  # macOS
        ]
    )
    app.setFont(font)
    QGuiApplication.setFont(font)


def run() -> None:
    """Load the catalog and settings, then start the game window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Odd One Out")
    app.setApplicationDisplayName("Odd One Out")
    configure_emoji_font(app)

    catalog = default_catalog()
    logging.info("Loaded %d themes, %d emojis", len(catalog.themes), len(catalog.all_emojis))

    storage = StorageGateway()
    controller = GameController(storage=storage)

    window = MainWindow(controller)
    window.resize(520, 680)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
