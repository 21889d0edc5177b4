"""Template tags and filters for the ticket store."""

from decimal import ROUND_HALF_UP, Decimal

from django import template

from festival_tickets.settings import get_config
from festival_tickets.store.catalog import display_name

register = template.Library()


@register.filter
def format_currency(amount: Decimal | None) -> str:
    """Format a decimal amount with the configured currency symbol.

    Handles ``None`` gracefully by treating it as zero. Negative amounts are
    rendered with a leading minus, e.g. ``"-$5.00"`` for a discount line.

    Usage in templates::

        {% load store_tags %}
        {{ summary.total|format_currency }}

    Args:
        amount: The monetary amount, or ``None``.

    Returns:
        A formatted string such as ``"$10.00"``.
    """
    if amount is None:
        amount = Decimal("0.00")
    symbol = get_config().currency_symbol
    rounded = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if rounded < 0:
        return f"-{symbol}{-rounded:.2f}"
    return f"{symbol}{rounded:.2f}"


@register.filter
def ticket_name(event_type: str, ticket_type: str) -> str:
    """Return the buyer-facing ticket name.

    Usage in templates::

        {% load store_tags %}
        {{ item.event_type|ticket_name:item.ticket_type }}
    """
    return display_name(event_type, ticket_type)
