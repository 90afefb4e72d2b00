import logging
import os
import platform
import time
from datetime import timedelta

# global variable which tracks if any logger has been initiated
# As soon as its instantiated the default logger will be configured with a path to save the log file
__is_initiated__ = False

# Add a new logging level to the default logger, level 21 is just above INFO (20)
# This has to happen at load time to make the .progress() method available even if no logger is instantiated
PROGRESS_LEVELV_NUM = 21
logging.PROGRESS = PROGRESS_LEVELV_NUM
logging.addLevelName(PROGRESS_LEVELV_NUM, "PROGRESS")

LOG_FILE_NAME = "log.txt"


def progress(self, message, *args, **kws):
    if self.isEnabledFor(PROGRESS_LEVELV_NUM):
        # Yes, logger takes its '*args' as 'args'.
        self._log(PROGRESS_LEVELV_NUM, message, args, **kws)


logging.Logger.progress = progress


class DefaultFormatter(logging.Formatter):
    template = "%(levelname)s: %(message)s"

    grey = "\x1b[38;20m"
    yellow = "\x1b[33;20m"
    red = "\x1b[31;20m"
    bold_red = "\x1b[31;1m"
    green = "\x1b[32;20m"
    reset = "\x1b[0m"

    def __init__(self, use_ansi: bool = True):
        """
        Default formatter adding elapsed time and optional ANSI colors.

        Parameters
        ----------

        use_ansi : bool, default True
            Whether to use ANSI escape codes to color the output.

        """
        super().__init__()
        self.start_time = time.time()

        if use_ansi:
            self.formatter = {
                logging.DEBUG: logging.Formatter(self.template),
                logging.INFO: logging.Formatter(self.template),
                logging.PROGRESS: logging.Formatter(
                    self.green + self.template + self.reset
                ),
                logging.WARNING: logging.Formatter(
                    self.yellow + self.template + self.reset
                ),
                logging.ERROR: logging.Formatter(self.red + self.template + self.reset),
                logging.CRITICAL: logging.Formatter(
                    self.bold_red + self.template + self.reset
                ),
            }
        else:
            self.formatter = {
                level: logging.Formatter(self.template)
                for level in [
                    logging.DEBUG,
                    logging.INFO,
                    logging.PROGRESS,
                    logging.WARNING,
                    logging.ERROR,
                    logging.CRITICAL,
                ]
            }

    def format(self, record: logging.LogRecord):
        """Format the log record.

        Parameters
        ----------

        record : logging.LogRecord
            Log record to format.

        Returns
        -------
        str
            Formatted log record.
        """

        elapsed_seconds = record.created - self.start_time
        elapsed = timedelta(seconds=elapsed_seconds)

        formatter = self.formatter.get(record.levelno, self.formatter[logging.INFO])
        return f"{elapsed} {formatter.format(record)}"


def init_logging(
    log_folder: str = None, log_level: int = logging.INFO, overwrite: bool = True
):
    """Initialize the default logger.
    Sets the formatter and the console and file handlers.

    Parameters
    ----------

    log_folder : str, default None
        Path to the folder where the log file will be saved. If None, the log file will not be saved.

    log_level : int, default logging.INFO
        Log level to use. Can be logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR or logging.CRITICAL.

    overwrite : bool, default True
        Whether to overwrite the log file if it already exists.
    """

    global __is_initiated__

    logger = logging.getLogger()
    logger.handlers = []
    logger.setLevel(log_level)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(DefaultFormatter(use_ansi=True))
    logger.addHandler(ch)

    if log_folder is not None:
        log_name = os.path.join(log_folder, LOG_FILE_NAME)
        if os.path.exists(log_name) and overwrite:
            os.remove(log_name)
        fh = logging.FileHandler(log_name, encoding="utf-8")
        fh.setLevel(log_level)
        fh.setFormatter(DefaultFormatter(use_ansi=False))
        logger.addHandler(fh)

    __is_initiated__ = True


def print_environment() -> None:
    """Log the dbkey version and the versions of the numeric stack."""
    import numpy as np
    import pandas as pd
    import yaml

    import dbkey

    logger = logging.getLogger()

    logger.progress(f"dbkey version: {dbkey.__version__}")
    logger.progress(
        f"python: {platform.python_version()} ({platform.python_implementation()})"
    )

    logger.info("================ Environment ======================")
    logger.info(f"{'numpy':<15} : {np.__version__}")
    logger.info(f"{'pandas':<15} : {pd.__version__}")
    logger.info(f"{'pyyaml':<15} : {yaml.__version__}")
    logger.info("===================================================")
