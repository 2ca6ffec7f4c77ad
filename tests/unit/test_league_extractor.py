"""
Unit tests for the league directory fetcher
"""

import httpx
import pytest
from datetime import datetime
from unittest.mock import AsyncMock, Mock
from ingestion.extractors.league_extractor import (
    LEAGUE_URLS,
    LeagueDirectoryFetcher,
    map_poe1_leagues,
    map_poe2_leagues,
)
from core.exceptions import LeagueFetchError
from models.base import Game

POE1_PAYLOAD = [
    {"id": "Standard", "name": "Standard", "startAt": "2013-01-23T21:00:00Z", "endAt": None, "rules": []},
    {"id": "Keepers", "name": "Keepers", "startAt": "2025-10-31T19:00:00Z", "endAt": None, "rules": []},
    {"id": "SSF Keepers", "name": "SSF Keepers", "rules": [{"id": "NoParties", "name": "Solo"}]},
    {"id": "Settlers", "startAt": "2024-07-26T19:00:00Z", "endAt": "2024-12-02T21:00:00Z", "rules": []},
]

POE2_PAYLOAD = {
    "result": [
        {"id": "Dawn", "realm": "poe2", "text": "Dawn of the Hunt"},
        {"id": "Standard", "realm": "poe2", "text": "Standard"},
    ]
}


def _fetcher(handler) -> LeagueDirectoryFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return LeagueDirectoryFetcher(db_session=Mock(), client=client, timeout=5.0)


class TestMapping:

    def test_poe1_drops_solo_leagues(self):
        leagues = map_poe1_leagues(POE1_PAYLOAD, now=datetime(2025, 11, 1))
        assert [league.league_id for league in leagues] == ["Standard", "Keepers", "Settlers"]

    def test_poe1_dates_and_activity(self):
        leagues = {league.league_id: league for league in map_poe1_leagues(POE1_PAYLOAD, now=datetime(2025, 11, 1))}

        assert leagues["Keepers"].start_at == datetime(2025, 10, 31, 19, 0)
        assert leagues["Keepers"].end_at is None
        assert leagues["Keepers"].is_active is True

        assert leagues["Settlers"].name == "Settlers"
        assert leagues["Settlers"].end_at == datetime(2024, 12, 2, 21, 0)
        assert leagues["Settlers"].is_active is False

    def test_poe2_uses_text_as_name(self):
        leagues = map_poe2_leagues(POE2_PAYLOAD)
        assert [(league.league_id, league.name) for league in leagues] == [
            ("Dawn", "Dawn of the Hunt"),
            ("Standard", "Standard"),
        ]
        assert all(league.start_at is None for league in leagues)

    def test_poe2_missing_result(self):
        assert map_poe2_leagues({}) == []


class TestLeagueDirectoryFetcher:

    @pytest.mark.asyncio
    async def test_fetch_poe1(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=POE1_PAYLOAD)

        leagues = await _fetcher(handler).fetch_leagues(Game.POE1)

        assert len(requests) == 1
        assert str(requests[0].url) == LEAGUE_URLS[Game.POE1]
        assert requests[0].headers["User-Agent"].startswith("drop-weights-backend/")
        assert "SSF Keepers" not in [league.league_id for league in leagues]

    @pytest.mark.asyncio
    async def test_fetch_poe2(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == LEAGUE_URLS[Game.POE2]
            return httpx.Response(200, json=POE2_PAYLOAD)

        leagues = await _fetcher(handler).fetch_leagues(Game.POE2)
        assert [league.name for league in leagues] == ["Dawn of the Hunt", "Standard"]

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503, text="Service Unavailable")

        with pytest.raises(LeagueFetchError) as exc_info:
            await _fetcher(handler).fetch_leagues(Game.POE1)

        assert exc_info.value.context["status_code"] == 503
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(LeagueFetchError) as exc_info:
            await _fetcher(handler).fetch_leagues(Game.POE1)

        assert isinstance(exc_info.value.original_exception, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(LeagueFetchError) as exc_info:
            await _fetcher(handler).fetch_leagues(Game.POE1)

        assert exc_info.value.context["timeout"] == 5.0

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>maintenance</html>")

        with pytest.raises(LeagueFetchError, match="invalid JSON"):
            await _fetcher(handler).fetch_leagues(Game.POE1)

    @pytest.mark.asyncio
    async def test_unexpected_payload_shape(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"leagues": []})

        with pytest.raises(LeagueFetchError, match="Unexpected league payload"):
            await _fetcher(handler).fetch_leagues(Game.POE1)

    @pytest.mark.asyncio
    async def test_refresh_stores_leagues(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=POE2_PAYLOAD)

        fetcher = _fetcher(handler)
        fetcher.repository = Mock()
        fetcher.repository.replace_leagues = AsyncMock(return_value=2)

        stored = await fetcher.refresh(Game.POE2)

        assert stored == 2
        game, leagues = fetcher.repository.replace_leagues.await_args.args
        assert game == Game.POE2
        assert [league.league_id for league in leagues] == ["Dawn", "Standard"]
