from decimal import Decimal
from types import SimpleNamespace

import pytest

from clinical.services.severity import SeverityLevel, classify_severity, classify_sign, sign_levels, worst_signs

N, E, H, C = SeverityLevel.NORMAL, SeverityLevel.ELEVATED, SeverityLevel.HIGH, SeverityLevel.CRITICAL


@pytest.mark.parametrize('name,value,expected', [
    ('temperature', 40.0, C), ('temperature', 35.0, C), ('temperature', 41.2, C),
    ('temperature', 39.0, H), ('temperature', 36.0, H),
    ('temperature', 38.0, E), ('temperature', 36.5, E),
    ('temperature', 37.0, N), ('temperature', 36.6, N),
    ('blood_pressure_systolic', 180, C), ('blood_pressure_systolic', 90, C),
    ('blood_pressure_systolic', 160, H), ('blood_pressure_systolic', 100, H),
    ('blood_pressure_systolic', 140, E), ('blood_pressure_systolic', 110, E),
    ('blood_pressure_systolic', 120, N),
    ('heart_rate', 120, C), ('heart_rate', 50, C), ('heart_rate', 100, H), ('heart_rate', 60, H),
    ('heart_rate', 90, E), ('heart_rate', 70, E), ('heart_rate', 80, N),
    ('oxygen_saturation', 90, C), ('oxygen_saturation', 95, H), ('oxygen_saturation', 97, E),
    ('oxygen_saturation', 98, N), ('oxygen_saturation', 100, N),
    ('respiratory_rate', 30, C), ('respiratory_rate', 8, C), ('respiratory_rate', 25, H),
    ('respiratory_rate', 10, H), ('respiratory_rate', 20, E), ('respiratory_rate', 12, E),
    ('respiratory_rate', 16, N),
])
def test_classify_sign_thresholds(name, value, expected):
    assert classify_sign(name, value) == expected


def test_overlapping_band_resolves_to_the_first_match():
    # 36.0 satisfies both the High low bound and the Elevated low bound
    assert classify_sign('temperature', Decimal('36.0')) == H
    assert classify_sign('temperature', Decimal('36.3')) == E


def test_empty_reading_is_normal():
    assert classify_severity({}) == N


def test_single_sign_readings():
    assert classify_severity({'temperature': 40.0}) == C
    assert classify_severity({'temperature': 37.0}) == N


def test_worst_sign_wins():
    assert classify_severity({'temperature': 38.0, 'heart_rate': 130}) == C
    assert classify_severity({'temperature': 38.0, 'oxygen_saturation': 95}) == H


def test_absent_and_ungraded_signs_do_not_contribute():
    assert classify_severity({'temperature': None, 'heart_rate': 80}) == N
    assert classify_severity({'weight': 250, 'height': 40, 'blood_pressure_diastolic': 140}) == N


def test_accepts_objects_with_sign_attributes():
    reading = SimpleNamespace(temperature=Decimal('38.5'), heart_rate=None, respiratory_rate=26)
    assert classify_severity(reading) == H
    assert sign_levels(reading) == {'temperature': E, 'respiratory_rate': H}


def test_levels_are_ordered_and_labelled():
    assert N < E < H < C
    assert C.label == 'critical'
    assert SeverityLevel.from_label('high') == H


def test_worst_signs_lists_every_sign_at_the_top_level():
    reading = {'temperature': 40.5, 'heart_rate': 45, 'oxygen_saturation': 96}
    assert worst_signs(reading) == ['temperature', 'heart_rate']
    assert worst_signs({'temperature': 37.0}) == []


def test_nan_signs_count_as_not_measured():
    assert classify_sign('temperature', float('nan')) == N
    assert classify_severity({'temperature': float('nan')}) == N
    reading = {'temperature': float('nan'), 'heart_rate': Decimal('NaN'), 'oxygen_saturation': 93}
    assert classify_severity(reading) == H
    assert sign_levels(reading) == {'oxygen_saturation': H}
