import sys
from typing import Any

from loguru import logger

from .config import config

_configured = False


def configure_logging(level: str | None = None, *, json: bool | None = None, sink: Any = None) -> None:
    """
    Replace loguru's default sink with one honoring LOG_LEVEL / LOG_JSON.

    Safe to call more than once; only the first call installs the sink unless
    an explicit level is passed.
    """
    global _configured
    if _configured and level is None:
        return

    logger.remove()
    logger.add(
        sink if sink is not None else sys.stderr,
        level=(level or config.LOG_LEVEL).upper(),
        serialize=config.LOG_JSON if json is None else json,
        backtrace=False,
        diagnose=False,
    )
    _configured = True
