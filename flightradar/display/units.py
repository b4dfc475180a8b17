"""Unit conversions and label formatting for the radar display."""

METERS_TO_FEET = 3.28084
METERS_PER_SECOND_TO_KNOTS = 1.94384
METERS_PER_SECOND_TO_FPM = 196.85


def to_3_digits(num: int) -> str:
    """Zero-pad to three digits, e.g. 7 -> '007', 350 -> '350'."""
    return f'{num:03d}'


def altitude_hundreds_ft(baro_altitude_m) -> int:
    """Barometric altitude in hundreds of feet (flight-level style)."""
    return round((baro_altitude_m or 0) * METERS_TO_FEET / 100)


def speed_knots(velocity_mps) -> int:
    return round((velocity_mps or 0) * METERS_PER_SECOND_TO_KNOTS)


def vertical_rate_fpm(vertical_rate_mps) -> int:
    return round((vertical_rate_mps or 0) * METERS_PER_SECOND_TO_FPM)
