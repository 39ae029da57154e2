"""Runtime settings for formguard."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Engine and message catalog configuration.

    Attributes:
        locale: Preferred locale for message lookup
        fallback_locale: Locale consulted when the preferred one has no template
        messages_path: YAML message catalog to load, if any
        tick_interval: Seconds between driver ticks while settling
        cancel_superseded: Cancel a running job once a newer one is queued
    """

    locale: str = "en"
    fallback_locale: str = "en"
    messages_path: Path | None = None
    tick_interval: float = 0.01
    cancel_superseded: bool = False

    @classmethod
    def from_env(cls) -> Settings:
        """Create settings from environment variables.

        Reads:
        - FORMGUARD_LOCALE (default: en)
        - FORMGUARD_FALLBACK_LOCALE (default: en)
        - FORMGUARD_MESSAGES: path to a YAML message catalog
        - FORMGUARD_TICK_INTERVAL: seconds, must be positive (default: 0.01)
        - FORMGUARD_CANCEL_SUPERSEDED: 1/true/yes/on to enable

        Raises:
            ValueError: If FORMGUARD_TICK_INTERVAL is not a positive number
        """
        messages = os.environ.get("FORMGUARD_MESSAGES")

        raw_interval = os.environ.get("FORMGUARD_TICK_INTERVAL")
        tick_interval = cls.tick_interval
        if raw_interval:
            try:
                tick_interval = float(raw_interval)
            except ValueError:
                raise ValueError(
                    f"FORMGUARD_TICK_INTERVAL must be a number of seconds, got {raw_interval!r}"
                ) from None
            if tick_interval <= 0:
                raise ValueError(
                    f"FORMGUARD_TICK_INTERVAL must be positive, got {raw_interval!r}"
                )

        return cls(
            locale=os.environ.get("FORMGUARD_LOCALE", "en"),
            fallback_locale=os.environ.get("FORMGUARD_FALLBACK_LOCALE", "en"),
            messages_path=Path(messages) if messages else None,
            tick_interval=tick_interval,
            cancel_superseded=os.environ.get("FORMGUARD_CANCEL_SUPERSEDED", "").lower() in _TRUTHY,
        )
