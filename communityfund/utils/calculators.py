"""
Derived values for campaigns and their ledgers.

All functions are pure and accept ints, floats or Decimals.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from communityfund.errors import ValidationError

DEFAULT_PLATFORM_FEE_PERCENT = 10


def _to_decimal(value):
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _round_percent(ratio):
    # Half-up rounding, so 50.5 becomes 51 rather than 50
    capped = min(ratio, Decimal(1)) * 100
    return int(capped.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def calculate_donation_after_fee(amount, platform_fee_percent=DEFAULT_PLATFORM_FEE_PERCENT):
    """
    Calculate the donation amount left after the platform fee

    Args:
        amount: Original donation amount, must be greater than 0
        platform_fee_percent: Fee percentage taken by the platform

    Returns:
        Decimal amount after the fee is deducted
    """
    try:
        amount = _to_decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError('Invalid donation amount format')

    if not amount.is_finite():
        raise ValidationError('Invalid donation amount format')
    if amount <= 0:
        raise ValidationError('Donation amount must be greater than 0')

    fee_amount = (amount * _to_decimal(platform_fee_percent)) / 100
    return amount - fee_amount


def calculate_popularity_score(participant_count, target_participants):
    """Participants-to-target ratio as a 0-100 score."""
    if target_participants is None or target_participants <= 0:
        return 0
    ratio = _to_decimal(participant_count) / _to_decimal(target_participants)
    return _round_percent(ratio)


def calculate_total_donations(donations):
    """
    Sum the ``amount`` of every donation in the list.

    Entries may be mappings or objects. A missing, empty or non-numeric amount
    counts as 0, and anything other than a list or tuple sums to 0.
    """
    if not isinstance(donations, (list, tuple)):
        return Decimal(0)

    total = Decimal(0)
    for donation in donations:
        if isinstance(donation, dict):
            amount = donation.get('amount')
        else:
            amount = getattr(donation, 'amount', None)

        if not amount:
            continue
        try:
            amount = _to_decimal(amount)
        except (InvalidOperation, TypeError, ValueError):
            continue
        if amount.is_finite():
            total += amount
    return total


def calculate_completion_percentage(collected_amount, target_amount):
    """Collected-to-target ratio as a 0-100 percentage, 0 for a non-positive target."""
    if target_amount is None or _to_decimal(target_amount) <= 0:
        return 0
    ratio = _to_decimal(collected_amount or 0) / _to_decimal(target_amount)
    return _round_percent(max(ratio, Decimal(0)))
