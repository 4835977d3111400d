"""Fold 3-hour forecast samples into per-day summaries."""
from typing import Dict, Iterable, List

from weather_data import DailySummary, ForecastSample

MAX_DAYS = 7


def aggregate(samples: Iterable[ForecastSample], max_days: int = MAX_DAYS) -> List[DailySummary]:
    """
    Group samples by their local calendar date, in encounter order.

    The first sample of a date seeds the summary (condition, description, icon,
    humidity and wind come from it). Later samples of the same date only widen
    the temperature range and raise the precipitation probability, which is
    the worst case over the day rather than an average.

    Args:
        samples: Forecast samples in upstream (chronological) order
        max_days: Number of distinct dates to keep

    Returns:
        At most ``max_days`` summaries, first-seen date first
    """
    days: Dict[str, DailySummary] = {}
    for sample in samples:
        day = days.get(sample.local_date)
        if day is None:
            days[sample.local_date] = DailySummary(
                date_epoch_ms=sample.epoch_ms,
                temperature_min=sample.temperature,
                temperature_max=sample.temperature,
                condition=sample.condition,
                description=sample.description,
                icon_code=sample.icon_code,
                precipitation_probability_pct=sample.precipitation_probability_pct,
                humidity=sample.humidity,
                wind_speed=sample.wind_speed,
            )
            continue
        day.temperature_min = min(day.temperature_min, sample.temperature)
        day.temperature_max = max(day.temperature_max, sample.temperature)
        day.precipitation_probability_pct = max(
            day.precipitation_probability_pct, sample.precipitation_probability_pct
        )
    return list(days.values())[:max_days]
