"""Courtesy pauses between calls to the external player-data service.

The service has no published rate limit, so sync keeps a fixed gap after each
call. Gaps come from settings, and a pacer built with zero delays never sleeps.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Literal

from scoutcrm.config import settings

PauseKind = Literal["search", "profile", "error", "single"]


@dataclass
class RequestPacer:
    """Delays are in seconds."""

    search_delay: float = 0.0
    profile_delay: float = 0.0
    error_delay: float = 0.0
    single_delay: float = 0.0
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, repr=False)

    @classmethod
    def from_settings(cls) -> RequestPacer:
        return cls(
            search_delay=settings.tm_search_delay_ms / 1000,
            profile_delay=settings.tm_profile_delay_ms / 1000,
            error_delay=settings.tm_error_delay_ms / 1000,
            single_delay=settings.tm_single_delay_ms / 1000,
        )

    def delay_for(self, kind: PauseKind) -> float:
        return {
            "search": self.search_delay,
            "profile": self.profile_delay,
            "error": self.error_delay,
            "single": self.single_delay,
        }[kind]

    async def pause(self, kind: PauseKind) -> None:
        delay = self.delay_for(kind)
        if delay > 0:
            await self.sleep(delay)


def get_request_pacer() -> RequestPacer:
    """FastAPI dependency returning a pacer configured from settings."""
    return RequestPacer.from_settings()
