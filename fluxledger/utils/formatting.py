"""Display formatting for amounts and durations (Italian conventions)."""

from decimal import ROUND_HALF_UP, Decimal

from fluxledger.calculators.earnings_calculator import round_currency


def format_currency(amount: Decimal, symbol: str = "€") -> str:
    """Format an amount as Italian currency, e.g. ``€ 1.234,56``.

    Args:
        amount: Amount to format (rounded half up to cents)
        symbol: Currency symbol prefix

    Returns:
        Formatted string with '.' thousands and ',' decimal separators
    """
    rounded = round_currency(Decimal(amount))
    sign = "-" if rounded < 0 else ""
    grouped = f"{abs(rounded):,.2f}"
    localized = grouped.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}{symbol} {localized}"


def format_duration(seconds: int) -> str:
    """HH:MM:SS for positive durations, ``--:--`` otherwise."""
    if seconds <= 0:
        return "--:--"
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_duration_human(seconds: int) -> str:
    """Compact duration such as ``7h 30m`` or ``45m``."""
    if seconds <= 0:
        return "0m"
    hours, remainder = divmod(int(seconds), 3600)
    minutes = remainder // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_hours(hours: Decimal) -> str:
    """Hours with one decimal, e.g. ``2.5H``."""
    return f"{hours.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)}H"
