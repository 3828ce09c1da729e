import logging

LOG_FORMAT = '%(asctime)s:%(name)s:%(levelname)s:%(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def configure_logging(
        level: int | str = logging.INFO,
        log_file: str | None = None,
) -> None:
    """Send chatstream logs to stderr and, optionally, to *log_file*."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
    )
