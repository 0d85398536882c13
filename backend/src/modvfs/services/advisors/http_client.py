"""Ranking advisor backed by a remote HTTP service.

The service receives the current mod list and answers with a ``RankingHints``
JSON body::

    POST {base_url}/rank
    {"mods": [{"id": ..., "name": ..., "category": ..., "priority": ...}, ...]}

    200 {"explicit_order": [...]} or {"category_ranks": {...}}
"""

import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from modvfs.config import Settings
from modvfs.errors import HintResolutionFailedError
from modvfs.schemas.hints import RankingHints
from modvfs.schemas.mod import Mod
from modvfs.services.advisors.base import RankingAdvisor, register_advisor

logger = logging.getLogger(__name__)


class HttpRankingAdvisor:
    name = "http"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        api_key: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("HTTP advisor requires a base URL")
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = {"Accept": "application/json"}
        if api_key:
            self._headers["Authorization"] = f"Bearer {api_key}"
        self._transport = transport

    @staticmethod
    def _payload(mods: Sequence[Mod]) -> dict[str, Any]:
        return {
            "mods": [
                {
                    "id": m.id,
                    "identity_key": m.identity_key,
                    "name": m.name,
                    "version": m.version,
                    "category": m.category.value,
                    "priority": m.priority,
                    "enabled": m.enabled,
                }
                for m in mods
            ]
        }

    def suggest(self, mods: Sequence[Mod]) -> RankingHints:
        try:
            with httpx.Client(
                base_url=self._base_url,
                headers=self._headers,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                resp = client.post("/rank", json=self._payload(mods))
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as exc:
            logger.warning("Ranking service at %s failed: %s", self._base_url, exc)
            raise HintResolutionFailedError(f"Ranking service unavailable: {exc}") from exc
        except ValueError as exc:
            raise HintResolutionFailedError("Ranking service returned invalid JSON") from exc

        try:
            return RankingHints.model_validate(data)
        except ValidationError as exc:
            raise HintResolutionFailedError(f"Ranking service returned malformed hints: {exc}") from exc


@register_advisor("http")
def _http_advisor(settings: Settings) -> RankingAdvisor:
    return HttpRankingAdvisor(settings.advisor_url, timeout=settings.advisor_timeout)
