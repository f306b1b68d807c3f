"""The ``flipbook`` logger: colored console output plus a daily log file."""
import datetime
import logging
import os
import sys
from pathlib import Path

import termcolor

__appname__ = "flipbook"

LOG_DIR = Path.home() / f"{__appname__}_logs"
LOG_DIR.mkdir(parents=True, exist_ok=True)
LOG_FILE = LOG_DIR / f"{__appname__}_{datetime.date.today():%Y-%m-%d}.log"

if os.name == "nt":
    import colorama

    colorama.init()

LEVEL_COLORS = {
    "DEBUG": "blue",
    "INFO": "white",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red",
}

CONSOLE_FORMAT = "%(asctime)s [%(level_tag)s] %(origin)s - %(text)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(module)s:%(funcName)s:%(lineno)d - %(message)s"


class ColoredFormatter(logging.Formatter):
    """Adds ``level_tag``, ``origin`` and ``text`` fields, colored per level."""

    def __init__(self, fmt: str, use_color: bool = True) -> None:
        super().__init__(fmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        level_tag = f"{record.levelname:<7}"
        origin = f"{record.module}:{record.funcName}:{record.lineno}"
        text = record.getMessage()
        color = LEVEL_COLORS.get(record.levelname) if self.use_color else None
        if color:
            level_tag = termcolor.colored(level_tag, color, attrs=["bold"])
            origin = termcolor.colored(origin, "cyan")
            text = termcolor.colored(text, color)
        record.level_tag = level_tag
        record.origin = origin
        record.text = text
        return super().format(record)


def _build_logger() -> logging.Logger:
    log = logging.getLogger(__appname__)
    if log.handlers:
        return log
    log.setLevel(logging.INFO)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(ColoredFormatter(CONSOLE_FORMAT))
    log.addHandler(console)

    log_file = logging.FileHandler(LOG_FILE, encoding="utf-8")
    log_file.setFormatter(logging.Formatter(FILE_FORMAT))
    log.addHandler(log_file)
    return log


logger = _build_logger()
