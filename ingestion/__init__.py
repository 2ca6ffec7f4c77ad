"""
Drop-weights ingestion components.

Modules:
    runner: Load orchestrator (asset → parse → resolve league → version check
            → classify → persist → sync flags → notify)
    service: WeightsService façade with per-game load serialisation and
             query-time league fallback
    scheduler: APScheduler integration for periodic reloads
    notifier: Best-effort "weights refreshed" fan-out

Subpackages:
    extractors: Asset source, weights CSV parser, league directory fetcher
    transformers: Rarity classifiers and league label resolution
    loaders: Repositories for weights, cache metadata and the league directory

Usage:
    from ingestion.service import WeightsService
    from ingestion.extractors.asset_source import BundledAssetSource

Example:
    service = WeightsService(
        session_factory=get_session_maker(),
        asset_source=BundledAssetSource(),
    )
    result = await service.load("poe1")

    print(f"Loaded {result.card_count} items for {result.league}")

Error Handling:
    Loads never raise: read, parse and persistence failures come back as
    LoadResult(success=False, error=...). The exceptions in core.exceptions
    carry structured context for logging.
"""

__all__ = [
    "WeightLoadRunner",
    "WeightsService",
    "WeightsScheduler",
    "RefreshNotifier",
]
