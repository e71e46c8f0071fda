from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select how ``BeanRegistry`` synchronizes access to its buckets.

    Use these values for the registry ``lock_mode`` argument or the
    ``BEANWIRE_LOCK_MODE`` setting.
    """

    THREAD = "thread"
    """Guard each type bucket with a striped ``threading.Lock``."""

    NONE = "none"
    """Disable locking for single-threaded embedding."""
