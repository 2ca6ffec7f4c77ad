"""
Unit tests for league label resolution
"""

import logging
import pytest
from unittest.mock import AsyncMock
from ingestion.transformers.league_resolver import LeagueDirectory, LeagueResolver
from models.base import Game


class StaticDirectory(LeagueDirectory):
    def __init__(self, names):
        self.names = names

    async def resolve_canonical_league(self, game, raw_label):
        for name in self.names.get(game, []):
            if name.lower() == raw_label.lower():
                return name
        return None


@pytest.mark.asyncio
async def test_resolves_case_insensitively():
    resolver = LeagueResolver(StaticDirectory({Game.POE1: ["Keepers", "Standard"]}))
    assert await resolver.resolve(Game.POE1, "keepers") == "Keepers"


@pytest.mark.asyncio
async def test_miss_returns_raw_label_and_warns(caplog):
    resolver = LeagueResolver(StaticDirectory({Game.POE1: ["Standard"]}))

    with caplog.at_level(logging.WARNING, logger="ingestion.transformers.league_resolver"):
        league = await resolver.resolve(Game.POE1, "Keepers")

    assert league == "Keepers"
    assert "not found in league directory" in caplog.text


@pytest.mark.asyncio
async def test_lookup_is_per_game():
    directory = AsyncMock(spec=LeagueDirectory)
    directory.resolve_canonical_league.return_value = None

    resolver = LeagueResolver(directory)
    await resolver.resolve(Game.POE2, "Dawn")

    directory.resolve_canonical_league.assert_awaited_once_with(Game.POE2, "Dawn")
