from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, ExitStack, contextmanager, nullcontext
from typing import Any, TypeVar, cast

from beanwire.declarations import DEFAULT_QUALIFIER
from beanwire.exceptions import BeanNotFoundError, InvalidArgumentError
from beanwire.lock_mode import LockMode

T = TypeVar("T")

DEFAULT_LOCK_STRIPES = 16
_MISSING: Any = object()


class BeanRegistry:
    """Store bean instances keyed by type and qualifier.

    Each type owns a bucket mapping qualifier strings to instances. Types are
    compared by identity (a subclass is a different key) and qualifiers by
    string equality. Registering an existing key overwrites it; removing the
    last qualifier of a type drops the whole bucket.

    Buckets are guarded by striped locks: every type hashes to one of
    ``lock_stripes`` locks and all reads and writes of its bucket happen under
    that lock. Operations on the same key are therefore linearizable while
    types on different stripes never contend. Whole-registry snapshots
    (``registered_types`` and ``len``) take every stripe. ``LockMode.NONE``
    disables locking for single-threaded use.
    """

    def __init__(
        self,
        *,
        lock_mode: LockMode = LockMode.THREAD,
        lock_stripes: int = DEFAULT_LOCK_STRIPES,
    ) -> None:
        """Initialize an empty registry.

        Args:
            lock_mode: Synchronization strategy for bucket access.
            lock_stripes: Number of independent locks types are spread over.

        """
        if lock_stripes < 1:
            msg = f"lock_stripes must be at least 1, got {lock_stripes}."
            raise InvalidArgumentError(msg)
        self._lock_mode = lock_mode
        self._buckets: dict[Any, dict[str, Any]] = {}
        self._stripes: tuple[AbstractContextManager[Any], ...]
        if lock_mode is LockMode.THREAD:
            self._stripes = tuple(threading.Lock() for _ in range(lock_stripes))
        else:
            self._stripes = (nullcontext(),)

    @property
    def lock_mode(self) -> LockMode:
        """Synchronization strategy chosen at construction."""
        return self._lock_mode

    def register(self, bean_type: Any, instance: Any, qualifier: str = DEFAULT_QUALIFIER) -> None:
        """Store ``instance`` under ``(bean_type, qualifier)``, replacing any previous entry.

        Args:
            bean_type: Registry key type.
            instance: Bean instance to store.
            qualifier: Registration name; defaults to ``DEFAULT_QUALIFIER``.

        Raises:
            InvalidArgumentError: If any argument is ``None``.

        """
        self._check_key(bean_type, qualifier)
        if instance is None:
            msg = "Bean instance must not be None."
            raise InvalidArgumentError(msg)
        with self._stripe_for(bean_type):
            bucket = self._buckets.get(bean_type)
            if bucket is None:
                self._buckets[bean_type] = {qualifier: instance}
            else:
                bucket[qualifier] = instance

    def resolve(self, bean_type: type[T], qualifier: str = DEFAULT_QUALIFIER) -> T:
        """Return the instance stored under ``(bean_type, qualifier)``.

        Args:
            bean_type: Registry key type.
            qualifier: Registration name; defaults to ``DEFAULT_QUALIFIER``.

        Raises:
            InvalidArgumentError: If ``bean_type`` or ``qualifier`` is ``None``.
            BeanNotFoundError: If nothing is registered under the key.

        """
        self._check_key(bean_type, qualifier)
        with self._stripe_for(bean_type):
            bucket = self._buckets.get(bean_type)
            instance = _MISSING if bucket is None else bucket.get(qualifier, _MISSING)
        if instance is _MISSING:
            raise BeanNotFoundError(bean_type, qualifier)
        return cast("T", instance)

    def find(self, bean_type: type[T], qualifier: str = DEFAULT_QUALIFIER) -> T | None:
        """Return the instance stored under ``(bean_type, qualifier)``, or ``None``.

        Raises:
            InvalidArgumentError: If ``bean_type`` or ``qualifier`` is ``None``.

        """
        self._check_key(bean_type, qualifier)
        with self._stripe_for(bean_type):
            bucket = self._buckets.get(bean_type)
            return None if bucket is None else bucket.get(qualifier)

    def contains_bean(self, bean_type: Any, qualifier: str = DEFAULT_QUALIFIER) -> bool:
        """Return whether an instance is registered under ``(bean_type, qualifier)``.

        Raises:
            InvalidArgumentError: If ``bean_type`` or ``qualifier`` is ``None``.

        """
        self._check_key(bean_type, qualifier)
        with self._stripe_for(bean_type):
            bucket = self._buckets.get(bean_type)
            return bucket is not None and qualifier in bucket

    def get_qualifiers(self, bean_type: Any) -> frozenset[str]:
        """Return a snapshot of the qualifiers registered for ``bean_type``.

        An unregistered type yields an empty set.

        Raises:
            InvalidArgumentError: If ``bean_type`` is ``None``.

        """
        self._check_key(bean_type, DEFAULT_QUALIFIER)
        with self._stripe_for(bean_type):
            bucket = self._buckets.get(bean_type)
            return frozenset(bucket) if bucket is not None else frozenset()

    def deregister(self, bean_type: Any, qualifier: str = DEFAULT_QUALIFIER) -> None:
        """Remove the entry for ``(bean_type, qualifier)`` if present.

        Removing the last qualifier of a type removes the type itself.

        Raises:
            InvalidArgumentError: If ``bean_type`` or ``qualifier`` is ``None``.

        """
        self._check_key(bean_type, qualifier)
        with self._stripe_for(bean_type):
            self._remove_locked(bean_type, qualifier)

    def discard(self, bean_type: Any, qualifier: str, instance: Any) -> bool:
        """Remove the entry only while it still holds ``instance``.

        Used to roll back a registration without clobbering a newer one.

        Returns:
            ``True`` when the entry was removed.

        """
        self._check_key(bean_type, qualifier)
        with self._stripe_for(bean_type):
            bucket = self._buckets.get(bean_type)
            if bucket is None or bucket.get(qualifier, _MISSING) is not instance:
                return False
            self._remove_locked(bean_type, qualifier)
            return True

    def registered_types(self) -> tuple[Any, ...]:
        """Return a snapshot of every type that has at least one registration."""
        with self._all_stripes():
            return tuple(self._buckets)

    def __len__(self) -> int:
        with self._all_stripes():
            return len(self._buckets)

    def _remove_locked(self, bean_type: Any, qualifier: str) -> None:
        bucket = self._buckets.get(bean_type)
        if bucket is None:
            return
        bucket.pop(qualifier, None)
        if not bucket:
            del self._buckets[bean_type]

    @contextmanager
    def _all_stripes(self) -> Iterator[None]:
        # Always acquired in index order; single-key operations hold at most one stripe.
        with ExitStack() as stack:
            for stripe in self._stripes:
                stack.enter_context(stripe)
            yield

    def _stripe_for(self, bean_type: Any) -> AbstractContextManager[Any]:
        return self._stripes[hash(bean_type) % len(self._stripes)]

    def _check_key(self, bean_type: Any, qualifier: str | None) -> None:
        if bean_type is None:
            msg = "Bean type must not be None."
            raise InvalidArgumentError(msg)
        if qualifier is None:
            msg = "Qualifier must not be None."
            raise InvalidArgumentError(msg)


__all__ = ["DEFAULT_LOCK_STRIPES", "BeanRegistry"]
