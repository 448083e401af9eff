from __future__ import annotations

from typing import Dict, Sequence, Tuple

MAX_ROUTES = 5
SIGNATURE_PRECISION = 5
SIGNATURE_SEPARATOR = "|"

EARTH_RADIUS_M = 6_371_000.0
DEFAULT_MARKER_SPACING_M = 100.0
DEFAULT_MAX_MARKERS = 400

VIA_SPAN_FACTOR = 0.6
VIA_WIDE_FACTOR = 2.0

# (d_lat, d_lon) unit directions around the midpoint
VIA_PRIMARY_DIRECTIONS: Tuple[Tuple[float, float], ...] = (
    (1.0, 0.0),
    (-1.0, 0.0),
    (0.0, 1.0),
    (0.0, -1.0),
)

VIA_DIAGONAL_DIRECTIONS: Tuple[Tuple[float, float], ...] = (
    (1.0, 1.0),
    (1.0, -1.0),
    (-1.0, 1.0),
    (-1.0, -1.0),
)

ROUTE_COLORS: Tuple[str, ...] = (
    "#2F80ED",
    "#27AE60",
    "#F2994A",
    "#9B51E0",
    "#EB5757",
)

OUTLINE_COLOR = "#0B1220"

# emphasis -> (fill width, fill opacity, outline width, outline opacity)
STROKE_PROFILES: Dict[str, Tuple[float, float, float, float]] = {
    "selected_primary": (7.0, 1.0, 12.0, 0.35),
    "selected": (6.0, 1.0, 11.0, 0.3),
    "primary": (5.0, 0.85, 9.0, 0.25),
    "other": (4.0, 0.6, 8.0, 0.2),
}

UNNAMED_STREET = "Дорога без названия"

MANEUVER_LABELS: Dict[str, str] = {
    "turn": "Поворот",
    "new name": "Смена улицы",
    "depart": "Старт",
    "arrive": "Финиш",
    "merge": "Слияние",
    "on ramp": "Въезд",
    "off ramp": "Съезд",
    "fork": "Развилка",
    "end of road": "Конец дороги",
    "continue": "Прямо",
    "roundabout": "Круговое движение",
    "rotary": "Круговое движение",
    "roundabout turn": "Поворот на круговом движении",
    "exit roundabout": "Съезд с кругового движения",
    "exit rotary": "Съезд с кругового движения",
    "notification": "Уведомление",
}

MODIFIER_LABELS: Dict[str, str] = {
    "left": "налево",
    "slight left": "плавно налево",
    "sharp left": "резко налево",
    "right": "направо",
    "slight right": "плавно направо",
    "sharp right": "резко направо",
    "straight": "прямо",
    "uturn": "разворот",
}

SKIPPED_MANEUVER_TYPES: Tuple[str, ...] = ("depart", "arrive")

ROUNDABOUT_MARKERS: Sequence[str] = (
    "кругов",
    "roundabout",
    "rotary",
)

LEFT_MODIFIER_MARKER = "left"

MANEUVER_SAMPLE_LIMIT = 15

# (band, start hour inclusive, end hour exclusive); night wraps past midnight
TIME_BANDS: Tuple[Tuple[str, int, int], ...] = (
    ("night", 22, 6),
    ("morning_peak", 7, 10),
    ("evening_peak", 17, 20),
)

TIME_BAND_LABELS: Dict[str, str] = {
    "night": "Ночь: предпочтительны простые манёвры, избегать круговых развязок",
    "morning_peak": "Утренний час пик: важнее всего минимальное время в пути",
    "evening_peak": "Вечерний час пик: важнее всего минимальное время в пути",
    "balanced": "Обычное время: баланс между временем, простотой и расстоянием",
}
