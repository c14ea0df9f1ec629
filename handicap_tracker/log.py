import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def init_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Consola siempre; LOG_FILE añade además un fichero con el mismo formato."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT, datefmt=DATE_FORMAT)

    if log_file:
        root = logging.getLogger()
        # no duplicar el handler si se inicializa dos veces con el mismo fichero
        for h in root.handlers:
            if isinstance(h, logging.FileHandler) and h.baseFilename == os.path.abspath(log_file):
                return
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(file_handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name if name else "handicap_tracker")
