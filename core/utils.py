"""
Core utilities: query-parameter parsing and money/date helpers shared by the apps.
"""
import calendar
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework.exceptions import ValidationError

TWO_PLACES = Decimal('0.01')


def query_int(params, name, default=None, min_value=None, max_value=None):
    raw = params.get(name)
    if raw in (None, ''):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError({name: ['Must be an integer']})
    if min_value is not None and value < min_value:
        raise ValidationError({name: [f'Must be at least {min_value}']})
    if max_value is not None and value > max_value:
        raise ValidationError({name: [f'Must be at most {max_value}']})
    return value


def query_date(params, name, default=None, required=False):
    """Parse an ISO date (YYYY-MM-DD, or the date part of an ISO datetime)."""
    raw = params.get(name)
    if raw in (None, ''):
        if required:
            raise ValidationError({name: ['This query parameter is required']})
        return default
    parsed = None
    try:
        parsed = parse_date(str(raw)[:10])
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError({name: ['Must be a valid ISO date']})
    return parsed


def query_choice(params, name, choices, default=None):
    raw = params.get(name)
    if raw in (None, ''):
        return default
    if raw not in choices:
        raise ValidationError({name: [f'Must be one of: {", ".join(choices)}']})
    return raw


def today():
    return timezone.localdate()


def add_months(start, months):
    """Add calendar months, clamping the day to the last day of the target month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def end_date_for(start, duration, duration_type):
    if duration_type == 'MONTHS':
        return add_months(start, duration)
    return start + timedelta(days=duration)


def days_in_month(day):
    return calendar.monthrange(day.year, day.month)[1]


def money(value):
    """Decimal rounded to paise."""
    return Decimal(value or 0).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def as_float(value):
    return float(value) if value is not None else None


def percent(part, whole, digits=0):
    """part / whole * 100 rounded half-up; 0 when whole is 0."""
    if not whole:
        return 0
    value = Decimal(str(part)) / Decimal(str(whole)) * 100
    rounded = value.quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)
    if digits:
        return float(rounded)
    return int(rounded)


def query_date_range(params, required=True):
    """(startDate, endDate) query params; endDate must not precede startDate."""
    start = query_date(params, 'startDate', required=required)
    end = query_date(params, 'endDate', required=required)
    if start and end and end < start:
        raise ValidationError({'endDate': ['Must not be before startDate']})
    return start, end
