"""Root logger setup: a size-rotated log file plus stdout, both in one format.

Called once from main.py before the config is validated, so the session restore
and the first data store load are both captured in the log file.
"""

import logging
import logging.handlers
import os
import sys

from teamhub.config import get_config_value

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s"


def _resolve_log_level() -> int:
    if get_config_value("app.debug_mode", False):
        return logging.DEBUG
    level_name = str(get_config_value("app.log_level", "INFO")).upper()
    if level_name not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        return logging.INFO
    return getattr(logging, level_name)


def setup_logging() -> None:
    """Replace the root logger's handlers with the file and stdout handlers.

    A log file that cannot be opened is reported on stderr and skipped; stdout
    logging is always installed.
    """
    log_level = _resolve_log_level()
    log_formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    log_file_name = get_config_value("app.log_file_name", "teamhub.log")
    log_file = (
        log_file_name
        if isinstance(log_file_name, str) and log_file_name
        else "fallback_teamhub.log"
    )

    log_dir = os.path.dirname(log_file)
    if log_dir and not os.path.exists(log_dir):
        try:
            os.makedirs(log_dir)
        except OSError as e:
            print(
                f"Log directory {log_dir} unavailable ({e}); writing {os.path.basename(log_file)} here instead.",
                file=sys.stderr,
            )
            log_file = os.path.basename(log_file)

    # 5 MB per file, 5 backups
    try:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setFormatter(log_formatter)
        root_logger.addHandler(file_handler)
    except PermissionError:
        print(
            f"Cannot write {log_file}: permission denied. File logging disabled.",
            file=sys.stderr,
        )
    except OSError as e:
        print(f"Cannot open {log_file}: {e}. File logging disabled.", file=sys.stderr)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(log_formatter)
    root_logger.addHandler(stream_handler)

    logging.info(
        f"Logging to {log_file} at {logging.getLevelName(log_level)}"
    )
