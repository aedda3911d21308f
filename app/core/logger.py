# app/core/logger.py
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

ROOT_LOGGER_NAME = "clinic_dashboard"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "logs/dashboard.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", 5 * 1024 * 1024))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", 3))

if hasattr(sys.stdout, 'reconfigure'):
    sys.stdout.reconfigure(encoding='utf-8')


def _build_handlers():
    """Stdout plus a size-rotated file, both at LOG_LEVEL"""
    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    log_dir = os.path.dirname(LOG_FILE)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    handlers = [
        logging.StreamHandler(sys.stdout),
        RotatingFileHandler(filename=LOG_FILE, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT),
    ]
    for handler in handlers:
        handler.setLevel(LOG_LEVEL)
        handler.setFormatter(formatter)
    return handlers


_handlers = _build_handlers()


def _attach(target: logging.Logger) -> logging.Logger:
    target.setLevel(LOG_LEVEL)
    if not target.handlers:
        for handler in _handlers:
            target.addHandler(handler)
    target.propagate = False
    return target


logger = _attach(logging.getLogger(ROOT_LOGGER_NAME))


def get_module_logger(name: str) -> logging.Logger:
    """Child logger, e.g. `clinic_dashboard.classifier`, sharing the dashboard handlers"""
    return _attach(logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}"))
