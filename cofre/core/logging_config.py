import logging
import sys
import os
import re
from logging.handlers import RotatingFileHandler

from cofre.core.config import get_settings

PII_PATTERNS = {
    'ACCOUNT': re.compile(r'(?<=for account )[^\s,:]+|(?<=X-Account-Id: )[^\s,:]+', re.IGNORECASE),
    'EMAIL': re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'),
    'CPF': re.compile(r'\b\d{3}\.?\d{3}\.?\d{3}-?\d{2}\b'),
}


class PIISanitizingFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for label, pattern in PII_PATTERNS.items():
            message = pattern.sub(f'<{label}>', message)
        return message


def setup_logging():
    settings = get_settings()
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = PIISanitizingFormatter(log_format)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers = [console_handler]

    # File logging only for local runs
    if settings.ENVIRONMENT == "local":
        log_dir = "logs"
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)

        log_file = os.path.join(log_dir, "app.log")
        file_handler = RotatingFileHandler(log_file, maxBytes=5*1024*1024, backupCount=5)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    for h in root_logger.handlers[:]:
        root_logger.removeHandler(h)

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        handlers=handlers
    )

    # Set levels for noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
