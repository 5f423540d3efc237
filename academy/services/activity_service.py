"""
Activity Service

Forwards user activity heartbeats to the backend, at most once per
throttle window per user.
"""

import logging
import uuid

from academy.backends.base import Backend
from academy.core.cache import TTLCache
from academy.core.config import settings
from academy.core.exceptions import BackendError

logger = logging.getLogger(__name__)


# Users whose activity was recorded within the current window
recent_activity: TTLCache[bool] = TTLCache(
    max_size=10000,
    default_ttl=settings.ACTIVITY_THROTTLE_SECONDS,
)


async def record_activity(
    backend: Backend,
    user_id: uuid.UUID,
    cache: TTLCache[bool] = recent_activity,
) -> bool:
    """
    Record a heartbeat for a user.

    Failures are logged and dropped; a missed heartbeat only delays the
    user's "last active" time until the next one.

    Returns:
        True if the backend was updated, False if throttled or failed.
    """
    key = str(user_id)
    if cache.get(key):
        return False

    try:
        await backend.touch_activity(user_id)
    except BackendError as e:
        logger.debug("Activity update failed for %s: %s", user_id, e)
        return False

    cache.set(key, True)
    return True
