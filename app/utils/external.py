import asyncio
import logging
from typing import Any, Callable

from app.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


async def call_external(func: Callable[..., Any], *args, timeout: float, **kwargs) -> Any:
    """Run a blocking SDK call off the event loop with an upper bound on its duration."""
    name = getattr(func, "__qualname__", repr(func))
    try:
        return await asyncio.wait_for(asyncio.to_thread(func, *args, **kwargs), timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.warning("External call %s timed out after %ss", name, timeout)
        raise ExternalServiceError(f"{name} timed out after {timeout}s") from exc
