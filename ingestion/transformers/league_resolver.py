"""
Resolve the league label from the weights CSV header to a canonical name
"""

from abc import ABC, abstractmethod
from typing import Optional
from models.base import Game
import logging

logger = logging.getLogger(__name__)


class LeagueDirectory(ABC):
    """Lookup collaborator: case-insensitive league name search per game"""

    @abstractmethod
    async def resolve_canonical_league(self, game: Game, raw_label: str) -> Optional[str]:
        pass


class LeagueResolver:
    """
    Map a raw header label to the directory's spelling.

    A miss is not a failure: the raw label is used as-is and the rest of
    the load treats it as canonical.
    """

    def __init__(self, directory: LeagueDirectory):
        self.directory = directory

    async def resolve(self, game: Game, raw_label: str) -> str:
        match = await self.directory.resolve_canonical_league(game, raw_label)

        if match:
            logger.info(f'[{game.value}] Resolved CSV league label "{raw_label}" -> "{match}"')
            return match

        logger.warning(
            f'[{game.value}] CSV league label "{raw_label}" not found in league directory. '
            f"Using raw label as-is."
        )
        return raw_label
