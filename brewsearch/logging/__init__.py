from pathlib import Path
from typing import Final

from logly import _LoggerProxy, logger

LOG_DIR_PATH: Final[Path] = Path(__file__).parent.parent / "logs"


def init_logger(level: str = "INFO") -> _LoggerProxy:
    """Initialize the logger.

    Configures console output and a size-rotated file sink under `logs/`.

    Args:
        level: Minimum level to emit.
    """
    logger.configure(
        level=level,
        color=True,
        console=True,
        auto_sink=True,
    )

    logger.add(f"{LOG_DIR_PATH}/brewsearch.log", size_limit="10MB", retention=3)

    logger.success("logger initialized!")

    return logger
