from aiocache import cached as aio_cached, SimpleMemoryCache
from typing import Optional, Callable
import logging

from core.config import settings

logger = logging.getLogger(__name__)

def cached(
    ttl: Optional[int] = None,
    namespace: Optional[str] = None,
    key_builder: Optional[Callable] = None,
    noself: bool = True
):
    """Cache decorator that respects the enabled setting.

    Only successful results are stored; an exception leaves the cache untouched.
    """
    def decorator(func):
        if not settings.cache["enabled"]:
            return func

        return aio_cached(
            ttl=ttl,
            key_builder=key_builder,
            namespace=f"{settings.cache['prefix']}:{namespace or func.__name__}",
            cache=SimpleMemoryCache,
            noself=noself
        )(func)

    return decorator
