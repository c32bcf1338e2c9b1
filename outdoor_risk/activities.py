"""
Activity profile registry.

A fixed, ordered catalog of activity profiles. The registry is an explicit
read-only object built once at startup and handed to the aggregator, the
API and the CLI, so tests can construct one over custom profiles.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Tuple

from pydantic import ValidationError

from outdoor_risk.errors import ActivityCatalogError
from outdoor_risk.schemas import ActivityProfile

logger = logging.getLogger(__name__)


DEFAULT_ACTIVITIES: Tuple[ActivityProfile, ...] = (
    ActivityProfile(
        id="general",
        name="General Outdoor Activity",
        description="Walking, casual outdoor events",
        weights={"temperature": 0.3, "wind": 0.2, "precipitation": 0.3, "humidity": 0.1, "visibility": 0.1},
        optimal_conditions={
            "temp_range": (15, 25),
            "max_wind": 15,
            "max_precipitation": 0.1,
            "max_humidity": 70,
            "min_visibility": 5000,
        },
    ),
    ActivityProfile(
        id="hiking",
        name="Hiking & Trekking",
        description="Mountain hiking, trail walking",
        weights={"temperature": 0.25, "wind": 0.25, "precipitation": 0.25, "humidity": 0.15, "visibility": 0.1},
        optimal_conditions={
            "temp_range": (10, 22),
            "max_wind": 20,
            "max_precipitation": 0.2,
            "max_humidity": 75,
            "min_visibility": 3000,
        },
    ),
    ActivityProfile(
        id="cycling",
        name="Cycling",
        description="Road cycling, mountain biking",
        weights={"temperature": 0.2, "wind": 0.4, "precipitation": 0.3, "humidity": 0.05, "visibility": 0.05},
        optimal_conditions={
            "temp_range": (12, 24),
            "max_wind": 25,
            "max_precipitation": 0.1,
            "max_humidity": 80,
            "min_visibility": 8000,
        },
    ),
    ActivityProfile(
        id="water_sports",
        name="Water Sports",
        description="Swimming, kayaking, sailing",
        weights={"temperature": 0.35, "wind": 0.3, "precipitation": 0.15, "humidity": 0.05, "visibility": 0.15},
        optimal_conditions={
            "temp_range": (20, 30),
            "max_wind": 15,
            "max_precipitation": 0.3,
            "max_humidity": 85,
            "min_visibility": 2000,
        },
    ),
    ActivityProfile(
        id="picnic",
        name="Picnic & BBQ",
        description="Outdoor dining, family gatherings",
        weights={"temperature": 0.25, "wind": 0.25, "precipitation": 0.4, "humidity": 0.05, "visibility": 0.05},
        optimal_conditions={
            "temp_range": (18, 28),
            "max_wind": 12,
            "max_precipitation": 0.05,
            "max_humidity": 75,
            "min_visibility": 5000,
        },
    ),
    ActivityProfile(
        id="photography",
        name="Photography",
        description="Outdoor photography sessions",
        weights={"temperature": 0.15, "wind": 0.15, "precipitation": 0.25, "humidity": 0.1, "visibility": 0.35},
        optimal_conditions={
            "temp_range": (5, 30),
            "max_wind": 20,
            "max_precipitation": 0.1,
            "max_humidity": 80,
            "min_visibility": 10000,
        },
    ),
)


class ActivityRegistry:
    """
    Read-only, ordered lookup over activity profiles.

    The first profile is the fallback returned for unknown ids.
    """

    def __init__(self, profiles: Iterable[ActivityProfile]):
        """
        Initialize the registry.

        Args:
            profiles: Ordered activity profiles; the first one is the fallback

        Raises:
            ActivityCatalogError: If the catalog is empty or ids repeat
        """
        self._profiles: Tuple[ActivityProfile, ...] = tuple(profiles)
        if not self._profiles:
            raise ActivityCatalogError("Activity catalog must contain at least one profile")

        seen = set()
        duplicates = []
        for profile in self._profiles:
            if profile.id in seen:
                duplicates.append(profile.id)
            seen.add(profile.id)
        if duplicates:
            raise ActivityCatalogError(f"Duplicate activity ids: {sorted(set(duplicates))}")

        self._by_id = {profile.id: profile for profile in self._profiles}

    @classmethod
    def default(cls) -> "ActivityRegistry":
        """Registry over the built-in catalog."""
        return cls(DEFAULT_ACTIVITIES)

    @classmethod
    def from_file(cls, catalog_path: Path) -> "ActivityRegistry":
        """
        Load a catalog from a JSON file.

        The file holds either a list of profiles or ``{"activities": [...]}``.

        Raises:
            FileNotFoundError: If the catalog file doesn't exist
            ActivityCatalogError: If the JSON or a profile definition is invalid
        """
        catalog_path = Path(catalog_path)
        if not catalog_path.exists():
            raise FileNotFoundError(f"Activity catalog not found: {catalog_path}")

        try:
            with open(catalog_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ActivityCatalogError(f"Invalid activity catalog JSON: {e}") from e

        if isinstance(data, dict):
            data = data.get("activities", [])
        if not isinstance(data, list):
            raise ActivityCatalogError("Activity catalog must be a list of profiles")

        profiles: List[ActivityProfile] = []
        for index, entry in enumerate(data):
            try:
                profiles.append(ActivityProfile(**entry))
            except (TypeError, ValidationError) as e:
                raise ActivityCatalogError(f"Invalid activity profile at index {index}: {e}") from e

        registry = cls(profiles)
        logger.info("Loaded %d activity profiles from %s", len(registry), catalog_path)
        return registry

    @property
    def fallback(self) -> ActivityProfile:
        return self._profiles[0]

    def get_by_id(self, activity_id: str) -> ActivityProfile:
        """Return the profile for ``activity_id``, or the fallback for unknown ids."""
        profile = self._by_id.get(activity_id)
        if profile is None:
            logger.warning(
                "Unknown activity id '%s', falling back to '%s'", activity_id, self.fallback.id
            )
            return self.fallback
        return profile

    def all(self) -> Tuple[ActivityProfile, ...]:
        return self._profiles

    def ids(self) -> List[str]:
        return [profile.id for profile in self._profiles]

    def __contains__(self, activity_id: object) -> bool:
        return activity_id in self._by_id

    def __iter__(self) -> Iterator[ActivityProfile]:
        return iter(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)
