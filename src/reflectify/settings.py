from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class ReflectifySettings(BaseSettings):
    """Configure descriptor behaviour that has no single right answer.

    Values are read from ``REFLECTIFY_*`` environment variables when the
    settings object is created. Pass an explicit instance to ``reflect`` to
    override the process-wide defaults for one descriptor tree.

    Examples:
        .. code-block:: python

            strict = ReflectifySettings(raise_on_decode_error=True)
            descriptor = reflect(User(), settings=strict)

    """

    model_config = SettingsConfigDict(env_prefix="REFLECTIFY_", frozen=True)

    raise_on_decode_error: bool = False
    """Raise ``ReflectifyDecodeError`` from ``fill`` instead of dropping bad fields."""

    include_private_methods: bool = False
    """List ``_``-prefixed methods in ``methods()``. Dunder methods are never listed."""


@lru_cache(maxsize=1)
def get_settings() -> ReflectifySettings:
    """Return the process-wide settings, read once from the environment."""
    return ReflectifySettings()


__all__ = ["ReflectifySettings", "get_settings"]
