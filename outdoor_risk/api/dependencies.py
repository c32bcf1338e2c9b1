"""
API Dependencies

Shared FastAPI dependencies. Tests replace these through
``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends

from outdoor_risk.activities import ActivityRegistry
from outdoor_risk.risk import RiskAggregator
from outdoor_risk.settings import build_registry, get_settings


@lru_cache
def _load_registry() -> ActivityRegistry:
    return build_registry(get_settings())


def get_registry() -> ActivityRegistry:
    """Activity catalog, loaded once per process."""
    return _load_registry()


def get_aggregator(registry: ActivityRegistry = Depends(get_registry)) -> RiskAggregator:
    return RiskAggregator(registry)
