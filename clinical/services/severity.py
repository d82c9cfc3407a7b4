"""
Vital-sign severity classification.

Each present sign is graded on its own (Critical, then High, then Elevated;
first match wins) and the reading takes the worst grade of any sign.  Absent
signs do not contribute, so an empty reading is Normal.
"""
from __future__ import annotations

from decimal import Decimal
from enum import IntEnum
from typing import Any, Mapping, Optional, Union

Number = Union[int, float, Decimal]


class SeverityLevel(IntEnum):
    NORMAL = 0
    ELEVATED = 1
    HIGH = 2
    CRITICAL = 3

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> 'SeverityLevel':
        return cls[label.upper()]


# sign -> [(level, high_bound, low_bound), ...] checked in order.
# A value matches a band when value >= high_bound or value <= low_bound;
# None disables that side of the band.
THRESHOLDS: dict[str, list[tuple[SeverityLevel, Optional[Decimal], Optional[Decimal]]]] = {
    'temperature': [
        (SeverityLevel.CRITICAL, Decimal('40.0'), Decimal('35.0')),
        (SeverityLevel.HIGH, Decimal('39.0'), Decimal('36.0')),
        (SeverityLevel.ELEVATED, Decimal('38.0'), Decimal('36.5')),
    ],
    'blood_pressure_systolic': [
        (SeverityLevel.CRITICAL, Decimal(180), Decimal(90)),
        (SeverityLevel.HIGH, Decimal(160), Decimal(100)),
        (SeverityLevel.ELEVATED, Decimal(140), Decimal(110)),
    ],
    'heart_rate': [
        (SeverityLevel.CRITICAL, Decimal(120), Decimal(50)),
        (SeverityLevel.HIGH, Decimal(100), Decimal(60)),
        (SeverityLevel.ELEVATED, Decimal(90), Decimal(70)),
    ],
    'oxygen_saturation': [
        (SeverityLevel.CRITICAL, None, Decimal(90)),
        (SeverityLevel.HIGH, None, Decimal(95)),
        (SeverityLevel.ELEVATED, None, Decimal(97)),
    ],
    'respiratory_rate': [
        (SeverityLevel.CRITICAL, Decimal(30), Decimal(8)),
        (SeverityLevel.HIGH, Decimal(25), Decimal(10)),
        (SeverityLevel.ELEVATED, Decimal(20), Decimal(12)),
    ],
}

# Recorded but never graded
UNGRADED_SIGNS = ('blood_pressure_diastolic', 'weight', 'height')


def _as_decimal(value: Number) -> Decimal:
    # str() first so 36.5 (float) compares as exactly 36.5
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _is_nan(value: Number) -> bool:
    return _as_decimal(value).is_nan()


def classify_sign(name: str, value: Optional[Number]) -> SeverityLevel:
    """Grade a single sign; unknown, absent or NaN signs are Normal."""
    if value is None or name not in THRESHOLDS or _is_nan(value):
        return SeverityLevel.NORMAL
    v = _as_decimal(value)
    for level, high, low in THRESHOLDS[name]:
        if (high is not None and v >= high) or (low is not None and v <= low):
            return level
    return SeverityLevel.NORMAL


def _read(reading: Union[Mapping[str, Any], Any], name: str) -> Optional[Number]:
    if isinstance(reading, Mapping):
        return reading.get(name)
    return getattr(reading, name, None)


def sign_levels(reading: Union[Mapping[str, Any], Any]) -> dict[str, SeverityLevel]:
    """Per-sign grades for every graded sign present in ``reading``."""
    levels = {}
    for name in THRESHOLDS:
        value = _read(reading, name)
        # NaN counts as not measured
        if value is not None and not _is_nan(value):
            levels[name] = classify_sign(name, value)
    return levels


def classify_severity(reading: Union[Mapping[str, Any], Any]) -> SeverityLevel:
    """Return the worst grade across the present signs of ``reading``.

    ``reading`` may be a mapping keyed by sign name or any object exposing the
    sign names as attributes (e.g. a :class:`clinical.models.VitalSign`).
    """
    return max(sign_levels(reading).values(), default=SeverityLevel.NORMAL)


def worst_signs(reading: Union[Mapping[str, Any], Any]) -> list[str]:
    """Names of the signs that produced the overall grade (empty when Normal)."""
    levels = sign_levels(reading)
    worst = max(levels.values(), default=SeverityLevel.NORMAL)
    if worst == SeverityLevel.NORMAL:
        return []
    return [name for name, level in levels.items() if level == worst]
