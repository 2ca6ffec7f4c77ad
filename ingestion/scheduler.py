import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import async_sessionmaker
from core.config import settings
from core.exceptions import LeagueFetchError, PersistenceError
from ingestion.extractors.league_extractor import LeagueDirectoryFetcher
from ingestion.service import WeightsService
from models.base import Game

logger = logging.getLogger(__name__)


class WeightsScheduler:
    """Periodically refreshes the league directory, then re-runs the weight loads."""

    def __init__(
        self,
        service: WeightsService,
        session_factory: async_sessionmaker,
        interval_minutes: int = None,
        fetch_leagues: bool = True,
    ):
        self.scheduler = AsyncIOScheduler()
        self.service = service
        self.session_factory = session_factory
        self.interval_minutes = interval_minutes or settings.RELOAD_INTERVAL_MINUTES
        self.fetch_leagues = fetch_leagues

    async def refresh_leagues(self):
        """Refresh each game's league list; a failure keeps the cached list."""
        for game in Game:
            async with self.session_factory() as session:
                try:
                    await LeagueDirectoryFetcher(session).refresh(game)
                except (LeagueFetchError, PersistenceError) as e:
                    logger.warning(f"[{game.value}] League refresh failed, keeping cached list: {e}")

    async def run_reload_job(self):
        """Job to refresh leagues and reload weights"""
        logger.info("Scheduler: Starting weights reload job")
        if self.fetch_leagues:
            await self.refresh_leagues()
        await self.service.initialize()

    def start(self):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.run_reload_job,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id="weights_reload_job",
            replace_existing=True
        )
        self.scheduler.start()
        logger.info(f"Weights scheduler started (every {self.interval_minutes} minutes)")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown()
        logger.info("Weights scheduler stopped")
