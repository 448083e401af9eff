from __future__ import annotations

from datetime import datetime

from .constants import TIME_BAND_LABELS, TIME_BANDS


def resolve_time_band(moment: datetime) -> str:
    hour = moment.hour
    for band, start, end in TIME_BANDS:
        if start < end and start <= hour < end:
            return band
        if start > end and (hour >= start or hour < end):
            return band
    return "balanced"


def time_band_label(band: str) -> str:
    return TIME_BAND_LABELS.get(band, TIME_BAND_LABELS["balanced"])
