import logging
from colorlog import ColoredFormatter

APP_LOGGER = "mpay24_gateway"

# Chatty at INFO; raised to WARNING unless the app itself runs at DEBUG
NOISY_LOGGERS = ("apscheduler", "urllib3", "pika")


def setup_logger(level=logging.INFO):
    """Attach a colored console handler to the ``mpay24_gateway`` logger tree."""
    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(level)

    # Avoid duplicate handlers on reload
    logger.handlers.clear()

    formatter = ColoredFormatter(
        "%(log_color)s%(levelname)-8s%(reset)s | "
        "%(blue)s%(asctime)s%(reset)s | "
        "%(green)s%(name)s:%(lineno)d%(reset)s | "
        "%(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        log_colors={
            "DEBUG": "cyan",
            "INFO": "white",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red,bg_white",
        },
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)

    return logger
