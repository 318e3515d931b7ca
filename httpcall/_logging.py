import logging
from typing import Optional, Union

PACKAGE_LOGGER_NAME = "httpcall"
DEFAULT_LOG_LEVEL = logging.WARNING


def _resolve_level(log_level: Union[int, str]) -> int:
    level = logging.getLevelName(log_level.upper()) if isinstance(log_level, str) else log_level
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")
    return level


class LoggerConfig:
    """
    Logger configuration for the httpcall package.

    Every httpcall module logger is a child of the ``httpcall`` package logger. Handler and
    level live on the package logger only, so module loggers stay at NOTSET and a level set by
    any LoggerConfig (for instance from HTTPCallConfig.log_level) applies to all of them.

    Attributes:
        logger_name (str): Name of the logger returned by get_logger.
        log_level (int, optional): Level applied to the package logger, None to keep the current one.
    """

    def __init__(self, logger_name: str = PACKAGE_LOGGER_NAME, log_level: Optional[Union[int, str]] = None):
        """
        Initializes LoggerConfig.

        Args:
            logger_name (str): Name of the logger, usually the module ``__name__``. Default is 'httpcall'.
            log_level (int | str, optional): Level for the package logger, as a number or a level name
                such as "DEBUG". When omitted, an unset package logger defaults to WARNING.
        """
        self.logger_name = logger_name
        self.log_level = _resolve_level(log_level) if log_level is not None else None
        self.logger = self._initialize_logger()

    def _initialize_logger(self) -> logging.Logger:
        """
        Configures the package logger once and returns the requested logger.

        Returns:
            logging.Logger: Logger named ``logger_name``.
        """
        package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
        if self.log_level is not None:
            package_logger.setLevel(self.log_level)
        elif package_logger.level == logging.NOTSET:
            package_logger.setLevel(DEFAULT_LOG_LEVEL)

        if not package_logger.hasHandlers():
            console_handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
            console_handler.setFormatter(formatter)

            package_logger.addHandler(console_handler)

        return logging.getLogger(self.logger_name)

    def get_logger(self) -> logging.Logger:
        """
        Provides the configured logger instance.

        Returns:
            logging.Logger: The logger instance.
        """
        return self.logger
