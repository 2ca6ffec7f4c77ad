"""
Locate and read the bundled weights asset
"""

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional
from models.base import Game
from core.config import settings
from core.exceptions import AssetReadError
import logging

logger = logging.getLogger(__name__)

WEIGHTS_CSV_FILENAME = "prohibited-library-weights.csv"


class AssetSource(ABC):
    """
    Acquisition collaborator for the weights CSV.

    resolve() answers "which file, if any, belongs to this game";
    read() returns its text. Reading runs in a worker thread so the
    event loop stays responsive.
    """

    @abstractmethod
    def resolve(self, game: Game) -> Optional[Path]:
        """Path of the asset for this game, or None if the game has none."""
        pass

    def read_sync(self, path: Path) -> str:
        return path.read_text(encoding="utf-8-sig")

    async def read(self, game: Game, path: Path) -> str:
        try:
            return await asyncio.to_thread(self.read_sync, path)
        except (OSError, UnicodeDecodeError) as e:
            raise AssetReadError(
                f"Failed to read weights CSV: {e}",
                context={"game": game.value, "file_path": str(path)},
                original_exception=e
            )


class BundledAssetSource(AssetSource):
    """
    Assets shipped under <asset_dir>/<game>/.

    Only poe1 has a bundled weights file; poe2 resolves to None.
    """

    def __init__(self, asset_dir: str = None, files: Dict[Game, str] = None):
        self.asset_dir = Path(asset_dir or settings.ASSET_DIR)
        self.files = files if files is not None else {Game.POE1: WEIGHTS_CSV_FILENAME}

    def resolve(self, game: Game) -> Optional[Path]:
        filename = self.files.get(game)
        if filename is None:
            return None
        return self.asset_dir / game.value / filename
