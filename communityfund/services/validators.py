from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from communityfund.errors import ValidationError


def require_fields(data, fields):
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f'{field} is required')


def parse_decimal(value, field, allow_zero=False, places=2, max_digits=12):
    """Parse a money value that must fit a ``Numeric(max_digits, places)`` column."""
    if isinstance(value, bool) or value is None or value == '':
        raise ValidationError(f'{field} is required')
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f'Invalid {field} format')
    if not number.is_finite():
        raise ValidationError(f'Invalid {field} format')
    if number < 0 or (number == 0 and not allow_zero):
        raise ValidationError(f'{field} must be {">= 0" if allow_zero else "> 0"}')

    if number >= Decimal(10) ** (max_digits - places):
        raise ValidationError(f'{field} is too large')
    # Never rounded: the stored value must equal the accepted one
    if number != number.quantize(Decimal(1).scaleb(-places)):
        raise ValidationError(f'{field} must have at most {places} decimal places')
    return number


def parse_positive_int(value, field):
    if isinstance(value, bool) or value is None or value == '':
        raise ValidationError(f'{field} is required')
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f'{field} must be a whole number')
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid {field} format')
    if number <= 0:
        raise ValidationError(f'{field} must be > 0')
    return number


def parse_date(value, field):
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            raise ValidationError(f'Invalid {field} format')
    else:
        raise ValidationError(f'Invalid {field} format')

    # Stored as naive UTC
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_bool(value, field, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ('true', 'false'):
        return value.lower() == 'true'
    raise ValidationError(f'{field} must be a boolean')
