"""Static region configuration and the case-insensitive region lookup table.

Thresholds are per activity. Wind is the primary safety factor for every
activity; cloudiness limits are informational for all but snorkeling, and
fishing is driven by tide timing.
"""

from __future__ import annotations

from typing import Dict, List

from ocean_status.domain import ActivityThresholds, ActivityType, Coordinates, RegionConfig, TideType


class UnknownRegionError(LookupError):
    """Raised when a region id (or alias) is not configured."""

    def __init__(self, region_id: str) -> None:
        super().__init__(f"Unknown region: {region_id}")
        self.region_id = region_id


def _caribbean_thresholds() -> Dict[ActivityType, ActivityThresholds]:
    """Thresholds shared by the Dominican Republic regions."""
    return {
        ActivityType.SNORKELING: ActivityThresholds(
            max_wind_speed=6,
            max_cloudiness=40,   # light only, never blocks
            max_rain=0.5,
            preferred_tide=TideType.LOW,
        ),
        ActivityType.KAYAKING: ActivityThresholds(
            max_wind_speed=10,
            max_cloudiness=70,   # ignored
            max_rain=2,
            preferred_tide=None,
        ),
        ActivityType.SUP: ActivityThresholds(
            max_wind_speed=8,    # most wind-sensitive
            max_cloudiness=60,   # ignored
            max_rain=1,
            preferred_tide=None,
        ),
        ActivityType.FISHING: ActivityThresholds(
            max_wind_speed=12,
            max_cloudiness=80,
            max_rain=5,
            preferred_tide=TideType.HIGH,
        ),
    }


BAYAHIBE = RegionConfig(
    id="bayahibe-dominicus",
    name="Bayahibe / Dominicus",
    display_name="Bayahibe / Dominicus, DR",
    coordinates=Coordinates(latitude=18.3736, longitude=-68.8339),
    timezone="America/Santo_Domingo",
    thresholds=_caribbean_thresholds(),
)

PUNTA_CANA = RegionConfig(
    id="punta-cana",
    name="Punta Cana",
    display_name="Punta Cana, DR",
    coordinates=Coordinates(latitude=18.5601, longitude=-68.3725),
    timezone="America/Santo_Domingo",
    thresholds=_caribbean_thresholds(),
)

SOSUA = RegionConfig(
    id="sosua",
    name="Sosua",
    display_name="Sosua, DR",
    coordinates=Coordinates(latitude=19.7521, longitude=-70.5170),
    timezone="America/Santo_Domingo",
    thresholds=_caribbean_thresholds(),
)

CABARETE = RegionConfig(
    id="cabarete",
    name="Cabarete",
    display_name="Cabarete, DR",
    coordinates=Coordinates(latitude=19.7495, longitude=-70.4083),
    timezone="America/Santo_Domingo",
    thresholds=_caribbean_thresholds(),
)

REGIONS: List[RegionConfig] = [BAYAHIBE, PUNTA_CANA, SOSUA, CABARETE]

# Lower-case id or alias -> region. Aliases: "bayahibe", "puntacana".
REGION_LOOKUP: Dict[str, RegionConfig] = {
    "bayahibe-dominicus": BAYAHIBE,
    "bayahibe": BAYAHIBE,
    "punta-cana": PUNTA_CANA,
    "puntacana": PUNTA_CANA,
    "sosua": SOSUA,
    "cabarete": CABARETE,
}


def get_region_config(region_id: str) -> RegionConfig:
    """Resolve a region id or alias, ignoring case and surrounding whitespace."""
    key = (region_id or "").strip().lower()
    try:
        return REGION_LOOKUP[key]
    except KeyError:
        raise UnknownRegionError(region_id) from None
