import os
import sys

from loguru import logger

from app.core.config import settings

LOG_DIR = settings.LOG_DIR
LOG_FORMAT = "{time} | {level} | {extra[log_type]} | {message}"

# log_type -> file; pick a channel with logger.bind(log_type=...)
CHANNELS = {
    "booking": "bookings.log",
    "payment": "payments.log",
    "admin": "admin.log",
}

os.makedirs(LOG_DIR, exist_ok=True)

# Remove default handler
logger.remove()
logger.configure(extra={"log_type": "app"})

# Console
logger.add(sys.stderr, level=settings.LOG_LEVEL, format=LOG_FORMAT)

# Everything, INFO and up
logger.add(
    f"{LOG_DIR}/app.log",
    rotation="1 week",
    retention="4 weeks",
    level="INFO",
    enqueue=True,
    format=LOG_FORMAT,
)


def _channel(log_type: str):
    return lambda record: record["extra"].get("log_type") == log_type


for log_type, filename in CHANNELS.items():
    logger.add(
        f"{LOG_DIR}/{filename}",
        rotation="1 week",
        retention="4 weeks",
        level="INFO",
        enqueue=True,
        filter=_channel(log_type),
        format=LOG_FORMAT,
    )

# Errors with tracebacks (logger.opt(exception=...))
logger.add(
    f"{LOG_DIR}/errors.log",
    rotation="1 week",
    retention="8 weeks",
    level="ERROR",
    enqueue=True,
    diagnose=False,
)


def get_logger():
    return logger
