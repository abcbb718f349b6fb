import logging
import sys

from PySide6.QtWidgets import QApplication

from config.logging_setup import setup_logging
from config.settings import APP_NAME, get_settings
from db.db import SqliteStorage
from services.store import TaskStore
from ui.main_window import MainWindow

logger = logging.getLogger("app")


def main():
    settings = get_settings()
    setup_logging(log_dir=settings.log_dir, console_level=getattr(logging, settings.log_level, logging.INFO))
    logger.info("starting %s, data in %s", APP_NAME, settings.db_path)

    store = TaskStore(SqliteStorage(settings.db_path, key=settings.storage_key))

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    win = MainWindow(store, export_dir=settings.export_dir)
    win.resize(1200, 800)
    win.show()
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
