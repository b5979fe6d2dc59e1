"""Cache keys for the DJ token read path.

Responses are stored under a hash of the token so the raw token never
appears in cache keys. A second key per timeslot points at the response
key, which lets invalidation work from a timeslot id alone, even after the
token was rotated.
"""

import hashlib

from django.conf import settings
from django.core.cache import cache


def token_cache_key(token: str) -> str:
    digest = hashlib.sha256(token.encode("utf-8")).hexdigest()
    return f"submit:token:{digest}"


def timeslot_index_key(timeslot_id) -> str:
    return f"submit:timeslot:{timeslot_id}"


def get_cached_resolution(token: str) -> dict | None:
    return cache.get(token_cache_key(token))


def cache_resolution(token: str, timeslot_id, data: dict) -> None:
    key = token_cache_key(token)
    timeout = settings.TOKEN_CACHE_TIMEOUT
    cache.set(key, data, timeout)
    cache.set(timeslot_index_key(timeslot_id), key, timeout)


def invalidate_timeslots(timeslot_ids) -> None:
    index_keys = [timeslot_index_key(t) for t in timeslot_ids]
    if not index_keys:
        return
    cached = cache.get_many(index_keys)
    cache.delete_many(index_keys + list(cached.values()))
