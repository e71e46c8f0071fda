from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from beanwire.lock_mode import LockMode
from beanwire.registry import DEFAULT_LOCK_STRIPES


class ContainerSettings(BaseSettings):
    """Configure registry locking and injection strictness.

    Values are read from ``BEANWIRE_``-prefixed environment variables when
    not passed explicitly, for example ``BEANWIRE_STRICT_SETTERS=true``.
    """

    model_config = SettingsConfigDict(env_prefix="BEANWIRE_", frozen=True)

    lock_mode: LockMode = LockMode.THREAD
    """Registry synchronization strategy."""

    lock_stripes: int = Field(default=DEFAULT_LOCK_STRIPES, ge=1)
    """Number of registry lock stripes when ``lock_mode`` is ``THREAD``."""

    strict_setters: bool = False
    """Reject malformed ``@inject`` setters instead of skipping them."""


__all__ = ["ContainerSettings"]
