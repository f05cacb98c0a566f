"""Allow running StretchTimer as a module: python -m stretchtimer."""

import logging
import sys

from PyQt6.QtWidgets import QApplication

from .database.db import init_db
from .app import StretchTimerApp


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()

    app = QApplication(sys.argv)
    app.setApplicationName("StretchTimer")
    app.setOrganizationName("StretchTimer")

    window = StretchTimerApp()
    app.aboutToQuit.connect(window.session.shutdown)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
