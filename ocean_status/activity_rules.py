"""Per-activity evaluators built on the primitives in assessment_engine.

Each evaluator combines wind, rain, clouds and tide timing with its own
precedence and produces one ActivityRecommendation. Wind dominates the
paddling and snorkeling activities; fishing looks at tide timing first.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Callable, Dict, List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ocean_status.assessment_engine import (
    RuleContext,
    TideEvaluation,
    calculate_window,
    evaluate_cloudiness,
    evaluate_rain,
    evaluate_tide,
    evaluate_wind,
)
from ocean_status.domain import (
    ActivityRecommendation,
    ActivityStatus,
    ActivityThresholds,
    ActivityType,
    HourlyForecastPoint,
    TideEvent,
    TideType,
    WeatherSnapshot,
)
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="activity_rules")

GOOD = ActivityStatus.GOOD
CAUTION = ActivityStatus.CAUTION
BAD = ActivityStatus.BAD

Evaluator = Callable[[RuleContext], ActivityRecommendation]


def _wind_first_status(wind: ActivityStatus, rain: ActivityStatus) -> ActivityStatus:
    """Shared wind/rain precedence for the paddling activities."""
    if wind == BAD:
        return BAD
    if wind == CAUTION:
        return BAD if rain == BAD else CAUTION
    return CAUTION if rain == BAD else GOOD


def _recommend(status: ActivityStatus, reason: str, window: str | None, default_window: str) -> ActivityRecommendation:
    if window is None and status == GOOD:
        window = default_window
    return ActivityRecommendation(status=status, reason=reason, window=window)


def _tide_label(preferred: TideType | None) -> str:
    return "high tide" if preferred == TideType.HIGH else "low tide"


def _local_clock(moment: datetime, timezone: str) -> str:
    """HH:MM in the region's zone, falling back to UTC for unknown zones."""
    try:
        zone = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError):
        zone = ZoneInfo("UTC")
    return moment.astimezone(zone).strftime("%H:%M")


def evaluate_snorkeling(ctx: RuleContext) -> ActivityRecommendation:
    """Calm water first; clouds and tide timing only refine a safe verdict."""
    weather, thresholds = ctx.weather, ctx.thresholds
    wind = evaluate_wind(weather.wind_speed, thresholds.max_wind_speed).status
    clouds = evaluate_cloudiness(weather.cloudiness, thresholds.max_cloudiness).status
    rain = evaluate_rain(weather.rain, thresholds.max_rain).status
    tide = evaluate_tide(ctx.tides, thresholds.preferred_tide, ctx.now).status

    status = _wind_first_status(wind, rain)
    # clouds may cost a calm, dry sea its "good" but can never make it unsafe
    if status == GOOD and clouds == BAD:
        status = CAUTION
    if status == GOOD and tide == BAD:
        status = CAUTION

    if status == GOOD:
        if tide == GOOD and clouds == GOOD:
            reason = "Perfect conditions for snorkeling. Calm waters, clear skies, and excellent visibility."
        elif tide == GOOD:
            reason = "Excellent conditions for snorkeling. Calm waters provide good visibility, though skies are cloudy."
        else:
            reason = "Good conditions for snorkeling. Calm sea makes for safe snorkeling with good visibility."
    elif status == CAUTION:
        if wind == CAUTION:
            reason = (
                f"Moderate wind ({weather.wind_speed:.1f} m/s) will create some surface chop. "
                "Visibility may be reduced, but snorkeling is still possible."
            )
        elif clouds == BAD:
            reason = (
                "Sea is calm, making snorkeling safe. Cloudy skies reduce light and color vibrancy, "
                "but visibility underwater is still good."
            )
        elif rain == BAD:
            reason = "Heavy rain expected, but sea is calm. Snorkeling is safe but may be less comfortable."
        elif tide == BAD:
            reason = (
                f"Conditions are good, but {_tide_label(thresholds.preferred_tide)} (better visibility) is coming "
                "later. Still fine for snorkeling right now."
            )
        else:
            reason = "Conditions are acceptable for snorkeling. Visibility may not be optimal, but still good."
    elif wind == BAD:
        reason = (
            f"Wind is too strong ({weather.wind_speed:.1f} m/s) for safe snorkeling. "
            "Water will be choppy with poor visibility. Wait for calmer conditions."
        )
    elif rain == BAD:
        reason = "Heavy rain expected. Conditions will be unsafe with poor visibility. Wait for better weather."
    else:
        reason = "Poor conditions for snorkeling. Wait for calmer sea conditions."

    window = calculate_window(ctx.hourly_forecast, thresholds, 0, 6)
    return _recommend(status, reason, window, "Next 4-6 hours")


def evaluate_kayaking(ctx: RuleContext) -> ActivityRecommendation:
    """Wind decides; heavy rain only downgrades. Clouds are not consulted."""
    weather, thresholds = ctx.weather, ctx.thresholds
    wind = evaluate_wind(weather.wind_speed, thresholds.max_wind_speed).status
    rain = evaluate_rain(weather.rain, thresholds.max_rain).status
    status = _wind_first_status(wind, rain)

    if status == GOOD:
        if rain == GOOD:
            reason = "Excellent conditions for kayaking. Calm waters and light winds. Perfect time to go out."
        else:
            reason = "Good conditions for kayaking. Calm sea makes paddling safe and enjoyable."
    elif status == CAUTION:
        if wind == CAUTION:
            reason = (
                f"Moderate wind ({weather.wind_speed:.1f} m/s). Experienced kayakers should be fine, "
                "but beginners should be cautious. Sea conditions are manageable."
            )
        elif rain == BAD:
            reason = "Heavy rain expected, but sea is calm. Conditions are safe but may be uncomfortable."
        else:
            reason = "Conditions are acceptable for kayaking. Sea is manageable but not ideal."
    elif wind == BAD:
        reason = (
            f"Wind is too strong ({weather.wind_speed:.1f} m/s) for safe kayaking. "
            "Sea will be choppy. Wait for calmer conditions."
        )
    else:
        reason = (
            f"Moderate wind ({weather.wind_speed:.1f} m/s) combined with heavy rain makes kayaking unsafe. "
            "Wait for better weather."
        )

    window = calculate_window(ctx.hourly_forecast, thresholds, 0, 8)
    return _recommend(status, reason, window, "Next 6-8 hours")


def evaluate_sup(ctx: RuleContext) -> ActivityRecommendation:
    """Same precedence as kayaking with SUP wording and a shorter window."""
    weather, thresholds = ctx.weather, ctx.thresholds
    wind = evaluate_wind(weather.wind_speed, thresholds.max_wind_speed).status
    rain = evaluate_rain(weather.rain, thresholds.max_rain).status
    status = _wind_first_status(wind, rain)

    if status == GOOD:
        if rain == GOOD:
            reason = "Perfect conditions for SUP. Calm waters and light winds. Ideal for paddling."
        else:
            reason = "Good conditions for SUP. Calm sea makes paddling safe."
    elif status == CAUTION:
        if wind == CAUTION:
            reason = (
                f"Moderate wind ({weather.wind_speed:.1f} m/s). Good for experienced paddlers, "
                "but beginners should be cautious. Balance will be more challenging."
            )
        elif rain == BAD:
            reason = "Heavy rain expected, but wind is calm. Conditions are safe for experienced paddlers."
        else:
            reason = "Conditions are acceptable for SUP. Requires experience and caution."
    elif wind == BAD:
        reason = (
            f"Too windy ({weather.wind_speed:.1f} m/s) for safe SUP. "
            "Water will be choppy and balance difficult. Wait for calmer conditions."
        )
    else:
        reason = (
            f"Moderate wind ({weather.wind_speed:.1f} m/s) combined with heavy rain makes SUP unsafe. "
            "Wait for better weather."
        )

    window = calculate_window(ctx.hourly_forecast, thresholds, 0, 5)
    return _recommend(status, reason, window, "Next 4-5 hours")


def _fishing_status(tide: ActivityStatus, wind: ActivityStatus, rain: ActivityStatus) -> ActivityStatus:
    if tide == GOOD:
        return CAUTION if BAD in (wind, rain) else GOOD
    if tide == CAUTION:
        return CAUTION if BAD in (wind, rain) else GOOD
    return BAD if wind == BAD else CAUTION


def _hours_until(event: TideEvent | None, now: datetime) -> int:
    """Whole hours to `event`, rounding halves up; 0 when unknown."""
    if event is None:
        return 0
    return math.floor((event.time - now).total_seconds() / 3600 + 0.5)


def evaluate_fishing(ctx: RuleContext) -> ActivityRecommendation:
    """Tide timing first, then wind and rain. Clouds are not consulted.

    Fishing only goes bad when the tide timing and the wind are both
    unfavourable; any other combination stays at caution or better.
    """
    weather, thresholds = ctx.weather, ctx.thresholds
    wind = evaluate_wind(weather.wind_speed, thresholds.max_wind_speed).status
    rain = evaluate_rain(weather.rain, thresholds.max_rain).status
    tide_eval: TideEvaluation = evaluate_tide(ctx.tides, thresholds.preferred_tide, ctx.now)
    tide = tide_eval.status
    status = _fishing_status(tide, wind, rain)

    label = _tide_label(thresholds.preferred_tide)
    next_preferred = tide_eval.next_preferred
    wind_kmh = weather.wind_speed * 3.6

    if status == GOOD:
        hours = _hours_until(next_preferred, ctx.now)
        if thresholds.preferred_tide is not None and 0 < hours <= 2:
            plural = "" if hours == 1 else "s"
            reason = (
                f"Excellent fishing conditions. {label.capitalize()} in {hours} hour{plural}. "
                "Peak feeding activity expected."
            )
        elif tide == GOOD:
            reason = "Great fishing conditions. Active feeding times with favorable tide and manageable weather."
        else:
            reason = "Good fishing conditions. Tide timing is favorable with calm conditions."
    elif status == CAUTION:
        if tide == BAD:
            when = _local_clock(next_preferred.time, ctx.timezone) if next_preferred else "later"
            reason = f"Fishing is possible, but activity is typically better during {label}. Next {label} at {when}."
        elif wind in (CAUTION, BAD):
            reason = (
                f"Fishing is possible, but wind ({weather.wind_speed:.1f} m/s) may make casting challenging. "
                "Tide timing is good though."
            )
        elif rain == BAD:
            reason = (
                "Fishing is possible in heavy rain, but conditions will be uncomfortable. "
                "Fish are still active during good tide timing."
            )
        else:
            reason = "Fishing is possible, but conditions are moderate. Activity may vary."
    else:
        reason = (
            f"Poor fishing conditions. Wind is too strong ({wind_kmh:.1f} km/h / {weather.wind_speed:.1f} m/s) "
            "and tide timing is not ideal. Wait for better conditions."
        )

    window = calculate_window(ctx.hourly_forecast, thresholds, 0, 4)
    return _recommend(status, reason, window, "Next 2-3 hours")


ACTIVITY_EVALUATORS: Dict[ActivityType, Evaluator] = {
    ActivityType.SNORKELING: evaluate_snorkeling,
    ActivityType.KAYAKING: evaluate_kayaking,
    ActivityType.SUP: evaluate_sup,
    ActivityType.FISHING: evaluate_fishing,
}


def evaluate_all(
    weather: WeatherSnapshot,
    tides: List[TideEvent],
    hourly_forecast: List[HourlyForecastPoint],
    thresholds: Dict[ActivityType, ActivityThresholds],
    now: datetime,
    *,
    timezone: str = "UTC",
) -> Dict[ActivityType, ActivityRecommendation]:
    """Run every registered evaluator against its region thresholds."""
    results: Dict[ActivityType, ActivityRecommendation] = {}
    for activity, evaluator in ACTIVITY_EVALUATORS.items():
        ctx = RuleContext(
            weather=weather,
            tides=tides,
            thresholds=thresholds[activity],
            now=now,
            hourly_forecast=hourly_forecast,
            timezone=timezone,
        )
        results[activity] = evaluator(ctx)
        logger.debug(
            "Evaluated activity",
            extra={"activity": activity.value, "status": results[activity].status.value},
        )
    return results
