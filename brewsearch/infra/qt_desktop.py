from logly import logger
from PySide6.QtCore import QUrl
from PySide6.QtGui import QDesktopServices


class QtUrlOpener:
    """Opens URLs with the desktop's default handler."""

    def open_url(self, url: str) -> None:
        logger.info(f"Opening url={url}")
        if not QDesktopServices.openUrl(QUrl(url)):
            logger.warning(f"No handler could open url={url}")
