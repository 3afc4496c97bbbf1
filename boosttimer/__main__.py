"""Allow running BoostTimer as a module: python -m boosttimer."""

import logging
import sys

from PyQt6.QtWidgets import QApplication

from .app import BoostTimerApp
from .database.db import init_db
from .log import configure_logging
from .settings import APP_SUPPORT_DIR, load_settings

logger = logging.getLogger(__name__)


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level, APP_SUPPORT_DIR / "logs", console=True)
    init_db()
    logger.info("BoostTimer starting")

    app = QApplication(sys.argv)
    app.setApplicationName("BoostTimer")
    app.setOrganizationName("BoostTimer")
    app.setQuitOnLastWindowClosed(False)

    window = BoostTimerApp(settings=settings)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
