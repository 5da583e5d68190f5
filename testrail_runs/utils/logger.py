import logging
import sys

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logger(name: str = "testrail", verbose: bool = False) -> logging.Logger:
    """
    Configures the reporter's logger. Child loggers (testrail.client,
    testrail.session, ...) inherit its handler.
    """
    logger = logging.getLogger(name)

    # Only the first call installs a handler
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
    logger.addHandler(handler)

    if verbose:
        # Connection-level detail from the HTTP stack
        logging.getLogger("urllib3").setLevel(logging.DEBUG)
        logging.getLogger("urllib3").addHandler(handler)

    return logger
