"""TOML loader for the ticket price catalog.

Loads and validates a price catalog TOML file (see ``catalog.example.toml``)
so that a store session can be started from a file instead of code::

    [prices.lessonline]
    early_bird = 200
    day_pass = 100

    [prices.all_access]
    early_bird = 800
"""

import tomllib
from decimal import Decimal
from pathlib import Path
from typing import Any

from festival_tickets.store.catalog import EventType, PriceCatalog, TicketType

_EVENT_TYPES: frozenset[str] = frozenset(EventType.values)
_TICKET_TYPES: frozenset[str] = frozenset(TicketType.values)


def load_price_catalog(path: str | Path) -> PriceCatalog:
    """Load and validate a price catalog TOML file.

    Args:
        path: Filesystem path to the TOML file.

    Returns:
        A :class:`~festival_tickets.store.catalog.PriceCatalog` with
        ``Decimal`` prices, in file order.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the ``[prices]`` table is missing, names an unknown
            event or ticket type, holds a non-numeric or negative price, or
            the file is not valid TOML.
    """
    path = Path(path)
    if not path.exists():
        msg = f"Price catalog file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open("rb") as fh:
        try:
            data: dict[str, Any] = tomllib.load(fh, parse_float=Decimal)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {path}: {exc}"
            raise ValueError(msg) from exc

    if "prices" not in data:
        msg = "Missing required [prices] table in catalog file"
        raise ValueError(msg)

    prices = data["prices"]
    _validate_mapping(prices, "prices")
    for event_type, ticket_prices in prices.items():
        label = f"prices.{event_type}"
        if event_type not in _EVENT_TYPES:
            msg = f"{label} is not a known event type (expected one of: {', '.join(sorted(_EVENT_TYPES))})"
            raise ValueError(msg)
        _validate_mapping(ticket_prices, label)
        for ticket_type, price in ticket_prices.items():
            _validate_price(ticket_type, price, f"{label}.{ticket_type}")

    return PriceCatalog(prices)


def _validate_price(ticket_type: str, price: object, label: str) -> None:
    """Validate one catalog entry's ticket type and price.

    Raises:
        ValueError: If the ticket type is unknown or the price is not a
            non-negative number.
    """
    if ticket_type not in _TICKET_TYPES:
        msg = f"{label} is not a known ticket type"
        raise ValueError(msg)
    if isinstance(price, bool) or not isinstance(price, (int, Decimal)):
        msg = f"{label} must be a number, got {type(price).__name__}"
        raise ValueError(msg)
    if price < 0:
        msg = f"{label} must not be negative"
        raise ValueError(msg)


def _validate_mapping(mapping: object, label: str) -> None:
    """Validate that *mapping* is a dict.

    Raises:
        TypeError: If *mapping* is not a dict.
    """
    if not isinstance(mapping, dict):
        msg = f"{label} must be a mapping, got {type(mapping).__name__}"
        raise TypeError(msg)
