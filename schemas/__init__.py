"""
Pydantic schemas for rows moving through a load and for API responses.

Schemas:
    weights: Parsed, classified and persisted weight rows, load results,
             status and league entries
    api: HTTP response envelopes

Usage:
    from schemas.weights import RawWeightRow, LoadResult, WeightStatus
    from schemas.api import WeightsResponse, HealthCheckResponse
"""

__all__ = [
    "RawWeightRow",
    "ClassifiedWeightRow",
    "ParseResult",
    "UpsertWeightRow",
    "ItemWeightRecord",
    "CacheMetadataRecord",
    "LoadResult",
    "WeightStatus",
    "LeagueEntry",
    "WeightsResponse",
    "ReloadResponse",
    "HealthCheckResponse",
    "ErrorResponse",
]
