import os
import sys

from PySide6.QtWidgets import QApplication

from brewsearch.application.search_controller import SearchController
from brewsearch.application.search_pipeline import create_pipeline
from brewsearch.config import SearchSettings
from brewsearch.infra.brew import BrewNotFoundError
from brewsearch.infra.qt_desktop import QtUrlOpener
from brewsearch.infra.terminal import SubprocessTerminalLauncher
from brewsearch.logging import init_logger
from brewsearch.presentation.main_window import MainWindow


def main() -> int:
    logger = init_logger(os.environ.get("BREWSEARCH_LOG_LEVEL", "INFO"))

    try:
        pipeline = create_pipeline(
            SubprocessTerminalLauncher(),
            QtUrlOpener(),
            settings=SearchSettings.from_env(),
        )
    except BrewNotFoundError as e:
        logger.error(f"Cannot start: {e}")
        return 1

    app = QApplication(sys.argv)
    controller = SearchController(pipeline)
    window = MainWindow(controller)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
