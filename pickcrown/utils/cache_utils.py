"""
Cache utilities for PickCrown
Caches read-heavy result views and clears them when results change
"""

import functools

from flask import current_app, request

from pickcrown import cache


def make_cache_key(*args, **kwargs):
    """Generate a cache key from request path and arguments"""
    path = request.path
    args_str = "_".join(str(arg) for arg in args)
    kwargs_str = "_".join(f"{k}_{v}" for k, v in sorted(kwargs.items()))
    return f"{path}_{args_str}_{kwargs_str}".replace("/", "_")


def cached_route(timeout=300, key_prefix="view"):
    """
    Decorator for caching route responses

    Args:
        timeout: Cache timeout in seconds (default 5 minutes)
        key_prefix: Prefix for cache key
    """

    def decorator(f):
        @functools.wraps(f)
        def wrapped(*args, **kwargs):
            cache_key = f"{key_prefix}_{make_cache_key(*args, **kwargs)}"

            result = cache.get(cache_key)
            if result is not None:
                current_app.logger.debug(f"Cache hit for key: {cache_key}")
                return result

            result = f(*args, **kwargs)
            cache.set(cache_key, result, timeout=timeout)
            current_app.logger.debug(f"Cache set for key: {cache_key}")

            return result

        return wrapped

    return decorator


def invalidate_results_cache(reason):
    """
    Drop cached standings and podiums after results or entries change.

    SimpleCache cannot delete by pattern, so the whole cache is cleared.
    """
    try:
        cache.clear()
        current_app.logger.info(f"Results cache cleared: {reason}")
    except Exception as e:
        current_app.logger.error(f"Failed to clear cache: {e}")
