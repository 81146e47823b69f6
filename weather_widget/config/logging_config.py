# config/logging_config.py
import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from weather_widget.config.db_config import LOGS_DIR

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-18s | %(funcName)-20s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "widget.log"


def _has_file_handler(logger: logging.Logger, log_file: Path) -> bool:
    return any(
        isinstance(h, logging.handlers.RotatingFileHandler) and Path(h.baseFilename) == log_file.resolve()
        for h in logger.handlers
    )


def setup_logging(log_level: str = "INFO", log_dir: Optional[Path] = None) -> Path:
    """
    Логирование виджета: файл widget.log (ротация 10 МБ × 5) + консоль (stderr).
    Повторный вызов с тем же каталогом обработчики не дублирует.
    """
    log_dir = Path(log_dir) if log_dir else LOGS_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME
    level = getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    if not _has_file_handler(root, log_file):
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

        # stdout остаётся за выводом CLI
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logging.info("🔧 Логирование инициализировано: %s (%s)", log_file, logging.getLevelName(level))
    return log_file
