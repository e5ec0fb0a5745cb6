import logging

import colorlog

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

console_formatter = colorlog.ColoredFormatter(
    "%(log_color)s" + LOG_FORMAT,
    datefmt=DATE_FORMAT,
    log_colors={
        "DEBUG": "blue",
        "INFO": "green",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "bold_red",
    },
)

# No color codes in files
file_formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(verbosity=0, log_file=None):
    """
    Attach a colored console handler to the package logger.

    Verbosity 0 logs warnings, 1 adds info, 2 adds debug messages.
    With ``log_file`` the same records are also written, uncolored, to
    that file.
    """
    verbosity = max(0, min(verbosity, 2))
    loglevel = logging.WARNING - verbosity * 10

    logger = logging.getLogger("heritage_sites")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(loglevel)
    logger.propagate = False

    console = colorlog.StreamHandler()
    console.setFormatter(console_formatter)
    console.setLevel(loglevel)
    logger.addHandler(console)

    if log_file is not None:
        file_log = logging.FileHandler(log_file)
        file_log.setFormatter(file_formatter)
        file_log.setLevel(loglevel)
        logger.addHandler(file_log)
    return logger
