import logging

from flipbook.utils.logger import LOG_DIR, LOG_FILE, ColoredFormatter, logger


def test_package_logger_writes_to_console_and_daily_file():
    assert logger.name == "flipbook"
    kinds = {type(handler) for handler in logger.handlers}
    assert kinds == {logging.StreamHandler, logging.FileHandler}
    assert LOG_FILE.parent == LOG_DIR
    assert LOG_FILE.name.startswith("flipbook_")


def test_plain_formatter_fields():
    formatter = ColoredFormatter("[%(level_tag)s] %(origin)s - %(text)s", use_color=False)
    record = logging.LogRecord(
        "flipbook", logging.WARNING, __file__, 12, "page %d failed", (3,), None, "render"
    )
    assert formatter.format(record) == "[WARNING] test_logger:render:12 - page 3 failed"
