"""Event and ticket type choices and the read-only price catalog."""

from collections.abc import Iterator, Mapping
from decimal import Decimal
from types import MappingProxyType

from django.db import models


class EventType(models.TextChoices):
    """The co-located events sold by the store."""

    LESSONLINE = "lessonline", "LessOnline"
    MANIFEST = "manifest", "Manifest"
    SUMMER_CAMP = "summer_camp", "Summer Camp"
    ALL_ACCESS = "all_access", "All-Access"


class TicketType(models.TextChoices):
    """Ticket variants; validity per event is defined by the catalog."""

    STANDARD = "standard", "Standard"
    EARLY_BIRD = "early_bird", "Early Bird"
    SUPPORTER = "supporter", "Supporter"
    VOLUNTEER = "volunteer", "Volunteer"
    DAY_PASS_FRI = "day_pass_fri", "Half Day Pass (Fri)"
    DAY_PASS = "day_pass", "Day Pass"
    FULL_ACCESS_EARLY_BIRD = "full_access_early_bird", "Full Access Early Bird"
    STUDENT = "student", "Student"
    UPGRADE = "upgrade", "Upgrade"


DAY_PASS_TYPES: frozenset[str] = frozenset({TicketType.DAY_PASS, TicketType.DAY_PASS_FRI})

_DISPLAY_NAMES: dict[str, dict[str, str]] = {
    EventType.LESSONLINE: {
        TicketType.EARLY_BIRD: "LessOnline Early Bird",
        TicketType.STANDARD: "LessOnline",
        TicketType.SUPPORTER: "LessOnline Supporter",
        TicketType.VOLUNTEER: "LessOnline Volunteer",
        TicketType.DAY_PASS_FRI: "LessOnline Half Day Pass (Fri)",
        TicketType.DAY_PASS: "LessOnline Day Pass",
        TicketType.UPGRADE: "LessOnline Upgrade",
    },
    EventType.MANIFEST: {
        TicketType.EARLY_BIRD: "Manifest Early Bird",
        TicketType.STANDARD: "Manifest",
        TicketType.SUPPORTER: "Manifest Supporter",
        TicketType.STUDENT: "Manifest Student",
        TicketType.VOLUNTEER: "Manifest Volunteer",
        TicketType.DAY_PASS_FRI: "Manifest Half Day Pass (Fri)",
        TicketType.DAY_PASS: "Manifest Day Pass",
    },
    EventType.SUMMER_CAMP: {
        TicketType.EARLY_BIRD: "Summer Camp Early Bird",
        TicketType.STANDARD: "Summer Camp",
        TicketType.SUPPORTER: "Summer Camp Supporter",
        TicketType.DAY_PASS: "Summer Camp Day Pass",
        TicketType.DAY_PASS_FRI: "Summer Camp Half Day Pass (Fri)",
    },
    EventType.ALL_ACCESS: {
        TicketType.EARLY_BIRD: "All-Access Early Bird",
        TicketType.SUPPORTER: "All-Access Supporter",
    },
}


def display_name(event_type: str, ticket_type: str) -> str:
    """Return the buyer-facing name of a ticket, e.g. ``"Manifest Student"``."""
    return _DISPLAY_NAMES.get(event_type, {}).get(ticket_type, f"{event_type} {ticket_type}")


class PriceCatalog(Mapping):
    """Immutable price table: event type -> ticket type -> unit price.

    A ``(event, ticket type)`` pair is purchasable only when it is present
    here. Prices are stored as ``Decimal`` and never negative.
    """

    def __init__(self, prices: Mapping[str, Mapping[str, object]]) -> None:
        table: dict[str, MappingProxyType] = {}
        for event_type, ticket_prices in prices.items():
            event_type = EventType(event_type)
            row: dict[str, Decimal] = {}
            for ticket_type, price in ticket_prices.items():
                ticket_type = TicketType(ticket_type)
                amount = Decimal(str(price))
                if not amount.is_finite() or amount < 0:
                    msg = f"Price for {event_type}/{ticket_type} must be a non-negative number, got {price!r}"
                    raise ValueError(msg)
                row[ticket_type] = amount
            table[event_type] = MappingProxyType(row)
        self._prices = MappingProxyType(table)

    def __getitem__(self, event_type: str) -> Mapping[str, Decimal]:
        return self._prices[event_type]

    def __iter__(self) -> Iterator[str]:
        return iter(self._prices)

    def __len__(self) -> int:
        return len(self._prices)

    def __repr__(self) -> str:
        table = {str(event): {str(t): p for t, p in row.items()} for event, row in self._prices.items()}
        return f"PriceCatalog({table!r})"

    def price(self, event_type: str, ticket_type: str) -> Decimal | None:
        """Return the unit price, or ``None`` when the pair is not sold."""
        row = self._prices.get(event_type)
        if row is None:
            return None
        return row.get(ticket_type)

    def offers(self, event_type: str, ticket_type: str) -> bool:
        return self.price(event_type, ticket_type) is not None
