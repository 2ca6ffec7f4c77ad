"""
Fetch the public league list for each game.

Single attempt per call with a bounded timeout. Failures surface as
LeagueFetchError; callers decide whether to log and carry on with the
cached directory.
"""

import httpx
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from ingestion.loaders.league_repository import LeagueDirectoryRepository
from models.base import Game, utcnow
from schemas.weights import LeagueEntry
from core.config import settings
from core.exceptions import LeagueFetchError
import logging

logger = logging.getLogger(__name__)

LEAGUE_URLS = {
    Game.POE1: "https://www.pathofexile.com/api/leagues",
    Game.POE2: "https://www.pathofexile.com/api/trade2/data/leagues",
}

SOLO_RULE = "Solo"


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """ISO timestamp ("2024-12-06T19:00:00Z") to naive UTC, None when blank."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def map_poe1_leagues(payload: List[Dict[str, Any]], now: datetime = None) -> List[LeagueEntry]:
    """
    Map the poe1 league list.

    Leagues with a "Solo" rule are dropped. A league is active until its
    end date passes; leagues without an end date are always active.
    """
    now = now or utcnow()
    leagues = []
    for raw in payload:
        rules = raw.get("rules") or []
        if any(rule.get("name") == SOLO_RULE for rule in rules):
            continue

        end_at = _parse_timestamp(raw.get("endAt"))
        leagues.append(LeagueEntry(
            league_id=raw["id"],
            name=raw.get("name") or raw["id"],
            start_at=_parse_timestamp(raw.get("startAt")),
            end_at=end_at,
            is_active=end_at is None or end_at > now,
        ))
    return leagues


def map_poe2_leagues(payload: Dict[str, Any]) -> List[LeagueEntry]:
    """poe2 trade endpoint: {"result": [{"id", "realm", "text"}]}"""
    return [
        LeagueEntry(league_id=raw["id"], name=raw.get("text") or raw["id"])
        for raw in payload.get("result") or []
    ]


class LeagueDirectoryFetcher:
    """
    Refreshes the league_directory table from the public endpoints.

    Attributes:
        timeout: Request timeout in seconds
        user_agent: Sent with every request; the endpoints reject anonymous clients
    """

    def __init__(
        self,
        db_session: AsyncSession,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = None,
        user_agent: str = None,
    ):
        self.repository = LeagueDirectoryRepository(db_session)
        self.client = client
        self.timeout = timeout or settings.LEAGUE_FETCH_TIMEOUT
        self.user_agent = user_agent or f"drop-weights-backend/{settings.APP_VERSION}"

    async def _get_json(self, client: httpx.AsyncClient, url: str) -> Any:
        try:
            response = await client.get(
                url,
                headers={"User-Agent": self.user_agent, "Accept": "application/json"},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise LeagueFetchError(
                f"League request timed out: {url}",
                context={"url": url, "timeout": self.timeout},
                original_exception=e
            )
        except httpx.HTTPError as e:
            raise LeagueFetchError(
                f"League request failed: {url}",
                context={"url": url},
                original_exception=e
            )

        if response.status_code != 200:
            raise LeagueFetchError(
                f"League endpoint returned HTTP {response.status_code}",
                context={
                    "url": url,
                    "status_code": response.status_code,
                    "response_body": response.text[:500],
                }
            )

        try:
            return response.json()
        except ValueError as e:
            raise LeagueFetchError(
                "League endpoint returned invalid JSON",
                context={"url": url, "status_code": response.status_code},
                original_exception=e
            )

    async def fetch_leagues(self, game: Game) -> List[LeagueEntry]:
        """Fetch and map the league list for one game (no persistence)."""
        url = LEAGUE_URLS[game]

        if self.client is not None:
            payload = await self._get_json(self.client, url)
        else:
            async with httpx.AsyncClient() as client:
                payload = await self._get_json(client, url)

        try:
            if game == Game.POE1:
                leagues = map_poe1_leagues(payload)
            else:
                leagues = map_poe2_leagues(payload)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise LeagueFetchError(
                "Unexpected league payload shape",
                context={"url": url, "game": game.value},
                original_exception=e
            )

        logger.info(f"[{game.value}] Fetched {len(leagues)} leagues (excluding Solo variants)")
        return leagues

    async def refresh(self, game: Game) -> int:
        """Fetch leagues for a game and store them in the directory."""
        leagues = await self.fetch_leagues(game)
        return await self.repository.replace_leagues(game, leagues)
