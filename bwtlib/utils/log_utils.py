import logging
import typing as T

logger = logging.getLogger("bwtlib")

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"


# basically log(*args), but debug
def log(*args: T.Any) -> None:
    logger.debug(" ".join(map(str, args)))


def setup_logging(verbose: bool = False) -> None:
    """configure the root logger for the command line tools (debug if verbose)"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
