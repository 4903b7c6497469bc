import asyncio
from functools import wraps
from typing import Tuple, Type

import structlog

logger = structlog.get_logger()

def retry(
    tries: int = 3,
    delay: float = 1,
    backoff: float = 2,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    giveup_on: Tuple[Type[BaseException], ...] = (),
):
    """Retry an async callable on `retry_on` errors with exponential backoff.

    Errors listed in `giveup_on` are permanent and propagate on the first attempt.
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            current_delay = delay
            for attempt in range(1, tries + 1):
                try:
                    return await func(*args, **kwargs)
                except giveup_on:
                    raise
                except retry_on as e:
                    logger.warning("Retry attempt failed", func=func.__name__, attempt=attempt, error=str(e))
                    if attempt == tries:
                        raise
                    await asyncio.sleep(current_delay)
                    current_delay *= backoff
        return wrapper
    return decorator
