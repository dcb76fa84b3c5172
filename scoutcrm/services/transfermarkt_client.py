"""HTTP client for the external player-data service.

The service exposes a Transfermarkt-compatible JSON API
(``/players/search/{name}``, ``/players/{id}/profile`` and friends). One client
is created per request or per batch run and passed down explicitly; it owns an
``httpx.AsyncClient`` and must be closed (use it as an async context manager).
"""

from __future__ import annotations

import logging
from typing import Any, AsyncGenerator
from urllib.parse import quote

import httpx

from scoutcrm.config import settings
from scoutcrm.services.tm_payloads import normalize_search_results

logger = logging.getLogger(__name__)

_USER_AGENT = "ScoutCRM/1.0"

# Per-player sections exposed by the service
PLAYER_SECTIONS = (
    "profile",
    "market_value",
    "stats",
    "transfers",
    "injuries",
    "achievements",
)


class ExternalServiceError(RuntimeError):
    """The external service was unreachable or answered with a non-2xx status."""

    def __init__(self, step: str, message: str, status_code: int | None = None):
        super().__init__(message)
        self.step = step
        self.status_code = status_code


def _error_detail(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("detail"), str):
        return body["detail"]
    return None


class TransfermarktClient:
    """Thin async wrapper with timeout handling and response normalization."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.tm_api_base).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout or settings.tm_timeout_seconds),
            headers={"accept": "application/json", "User-Agent": _USER_AGENT},
            transport=transport,
        )

    async def __aenter__(self) -> TransfermarktClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_json(
        self,
        path: str,
        *,
        step: str,
        label: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        try:
            response = await self._client.get(path, params=params)
        except httpx.TimeoutException as exc:
            raise ExternalServiceError(step, f"{label}: Transfermarkt API timeout") from exc
        except httpx.HTTPError as exc:
            raise ExternalServiceError(step, f"{label}: {exc}") from exc

        if response.is_error:
            detail = _error_detail(response)
            message = f"{label} {response.status_code}"
            if detail:
                message = f"{message}: {detail}"
            raise ExternalServiceError(step, message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise ExternalServiceError(
                step, f"{label}: invalid JSON body", status_code=response.status_code
            ) from exc

    async def search_players(self, name: str, page: int = 1) -> list[dict[str, Any]]:
        """Search players by free-text name; returns raw candidate dicts."""
        body = await self._get_json(
            f"/players/search/{quote(name, safe='')}",
            step="search",
            label="TM search",
            params={"page_number": page},
        )
        return normalize_search_results(body)

    async def get_profile(self, external_id: str) -> Any:
        """Fetch the raw profile payload for an external id."""
        return await self._get_json(
            f"/players/{quote(external_id, safe='')}/profile",
            step="profile",
            label=f"TM profile {external_id}",
        )

    async def get_market_value(self, external_id: str) -> Any | None:
        """Fetch market-value history; None when the call fails for any reason."""
        try:
            return await self.get_section(external_id, "market_value")
        except ExternalServiceError as exc:
            logger.warning(f"Market value unavailable for {external_id}: {exc}")
            return None

    async def get_section(self, external_id: str, section: str) -> Any:
        """Fetch one per-player section (see PLAYER_SECTIONS)."""
        if section not in PLAYER_SECTIONS:
            raise ValueError(f"unknown section: {section}")
        return await self._get_json(
            f"/players/{quote(external_id, safe='')}/{section}",
            step=section,
            label=f"TM {section} {external_id}",
        )


async def get_transfermarkt_client() -> AsyncGenerator[TransfermarktClient, None]:
    """FastAPI dependency yielding a request-scoped client."""
    async with TransfermarktClient() as client:
        yield client
