"""
Cache utilities for Scoreline
Caches read-heavy JSON endpoints (standings, highlights)
"""

import functools

from flask import current_app, request

from scoreline import cache


def make_cache_key(*args, **kwargs):
    """Generate a cache key from the request path, query string and arguments"""
    path = request.full_path
    args_str = "_".join(str(arg) for arg in args)
    kwargs_str = "_".join(f"{k}_{v}" for k, v in sorted(kwargs.items()))
    return f"{path}_{args_str}_{kwargs_str}".replace("/", "_")


def cached_route(timeout=300, key_prefix="view"):
    """
    Decorator for caching route responses

    Args:
        timeout: Cache timeout in seconds, or the name of a config key
            holding it (default 5 minutes)
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
            if isinstance(timeout, str):
                seconds = current_app.config.get(timeout, 300)
            else:
                seconds = timeout
            cache.set(cache_key, result, timeout=seconds)
            current_app.logger.debug(f"Cache set for key: {cache_key}")

            return result

        return wrapped

    return decorator


def invalidate_cache_pattern(pattern):
    """
    Invalidate cache keys matching a pattern

    Args:
        pattern: Pattern to match cache keys
    """
    # SimpleCache cannot delete by pattern, so the whole cache goes
    cache.clear()
    current_app.logger.info(f"Cache cleared for pattern: {pattern}")
