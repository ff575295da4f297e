# taskgate/utils/logging_setup.py
"""
Настройка логирования для CLI.

Библиотека сама логирование не настраивает; это делает только точка входа.
"""

import logging
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler


class DetailedFormatter(logging.Formatter):
    """Форматтер с детальной информацией об ошибках"""

    def format(self, record):
        result = super().format(record)

        # Структурированный контекст из extra={"ctx": {...}}
        ctx = getattr(record, "ctx", None)
        if ctx:
            result += f" | ctx={ctx}"

        # Добавляем traceback для ошибок
        if record.exc_info:
            result += f"\n{'='*60}\nFULL TRACEBACK:\n{'='*60}\n"
            result += ''.join(traceback.format_exception(*record.exc_info))

        return result

    def formatException(self, ei):
        # Traceback уже добавлен в format()
        return ""


LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(
    level: Union[str, int] = "INFO",
    log_dir: Optional[Union[str, Path]] = None,
    console: Optional[Console] = None,
) -> Optional[Path]:
    """
    Configure the root logger: RichHandler on stderr, plus a dated
    taskgate_YYYYMMDD.log file when log_dir is given.

    Returns:
        Path of the log file, or None when logging to console only
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(level)
    root.addHandler(console_handler)

    log_file = None
    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        log_file = log_path / f'taskgate_{datetime.now().strftime("%Y%m%d")}.log'

        # Файловый хендлер для всех логов
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(DetailedFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(file_handler)

    root.setLevel(logging.DEBUG if log_file else level)
    return log_file
