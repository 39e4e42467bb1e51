from typing import Optional
from datetime import datetime
from functools import lru_cache

from fastapi import Depends, HTTPException, Query

from savorsync.config import get_settings
from savorsync.schemas.common import ALL_LOCATIONS, DateRange, Scope
from savorsync.providers.base import DataProvider
from savorsync.providers.mock import MockDataProvider
from savorsync.services.scope import date_range_presets

DEFAULT_PRESET = "last_30_days"


def align_to_provider(moment: Optional[datetime], provider: DataProvider) -> Optional[datetime]:
    """
    Express a query timestamp in the provider's timezone.

    Naive values are read as already being in that timezone. An offset-aware
    value cannot be placed against naive data and is rejected.
    """
    if moment is None:
        return None
    reference = provider.as_of.tzinfo
    if reference is None:
        if moment.tzinfo is not None:
            raise HTTPException(
                status_code=400,
                detail=f"Timestamp {moment.isoformat()} has a UTC offset but the data uses local time",
            )
        return moment
    if moment.tzinfo is None:
        return moment.replace(tzinfo=reference)
    return moment.astimezone(reference)


@lru_cache()
def get_data_provider() -> DataProvider:
    """Process-wide provider; the demo app serves seeded mock data."""
    settings = get_settings()
    as_of = datetime.now().replace(minute=0, second=0, microsecond=0)
    return MockDataProvider(as_of=as_of, seed=settings.mock_seed, days=settings.mock_days)


def get_scope(
    location_id: str = Query(ALL_LOCATIONS, description="Location id, or 'all' for every location"),
    preset: str = Query(DEFAULT_PRESET, description="Named date range, used when start/end are not given"),
    start: Optional[datetime] = Query(None, description="Custom range start (inclusive)"),
    end: Optional[datetime] = Query(None, description="Custom range end (inclusive)"),
    as_of: Optional[datetime] = Query(None, description="Reference time for presets (defaults to the data's as_of)"),
    provider: DataProvider = Depends(get_data_provider)
) -> Scope:
    """Resolve query parameters into a location/date-range scope."""
    if (start is None) != (end is None):
        raise HTTPException(status_code=400, detail="start and end must be given together")

    start = align_to_provider(start, provider)
    end = align_to_provider(end, provider)
    as_of = align_to_provider(as_of, provider)

    try:
        if start is not None:
            date_range = DateRange(start=start, end=end, label="Custom Range")
        else:
            presets = date_range_presets(as_of or provider.as_of)
            if preset not in presets:
                raise ValueError(f"Unknown preset {preset!r}; expected one of {', '.join(presets)}")
            date_range = presets[preset]
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return Scope(location_id=location_id, date_range=date_range)
