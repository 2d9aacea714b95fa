# refillr/services/decorators.py
import functools
import logging
from ..models.result import ErrorKind, Result

def guarded(message: str):
    """Turn unexpected faults inside a service call into a generic failure.

    Business outcomes are returned by the wrapped call as Results and pass
    through untouched; anything raised is logged once here with the
    operation name and reported to the caller as `internal`.
    """
    def decorator(func):
        logger = logging.getLogger(func.__module__)

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception:
                logger.error(f"[{func.__name__}] {message}", exc_info=True)
                return Result.fail(ErrorKind.INTERNAL, message)
        return wrapper
    return decorator
