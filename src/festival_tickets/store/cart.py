"""Immutable cart value for the ticket store.

A :class:`Cart` maps event type -> ticket type -> quantity. Every update
returns a new cart, so pricing and discount functions can be handed the
cart they were computed from without worrying about later mutation.
"""

from collections.abc import Iterator, Mapping
from decimal import Decimal
from types import MappingProxyType

from festival_tickets.store.catalog import EventType, PriceCatalog, TicketType


class Cart:
    """Ticket quantities keyed by ``(event_type, ticket_type)``.

    Absent and zero quantities both mean "not selected". Iteration follows
    the order in which each event and ticket type was first added; a cart
    built with :meth:`from_catalog` therefore iterates in catalog order.
    """

    __slots__ = ("_quantities",)

    def __init__(self, quantities: Mapping[str, Mapping[str, int]] | None = None) -> None:
        table: dict[str, MappingProxyType] = {}
        for event_type, row in (quantities or {}).items():
            table[event_type] = MappingProxyType({ticket_type: _clean_quantity(qty) for ticket_type, qty in row.items()})
        self._quantities = MappingProxyType(table)

    @classmethod
    def from_catalog(cls, catalog: PriceCatalog) -> "Cart":
        """Return an empty cart with a zero entry for every purchasable ticket."""
        return cls({event_type: dict.fromkeys(prices, 0) for event_type, prices in catalog.items()})

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cart):
            return NotImplemented
        return dict(self.selected()) == dict(other.selected())

    def __hash__(self) -> int:
        return hash(frozenset(self.selected()))

    def __repr__(self) -> str:
        selected = {f"{event}/{ticket}": qty for (event, ticket), qty in self.selected()}
        return f"Cart({selected!r})"

    def set_quantity(self, event_type: str, ticket_type: str, qty: int) -> "Cart":
        """Return a new cart with the quantity for one ticket replaced.

        Quantities below zero are clamped to zero.
        """
        event_type = EventType(event_type)
        ticket_type = TicketType(ticket_type)
        table = {event: dict(row) for event, row in self._quantities.items()}
        table.setdefault(event_type, {})[ticket_type] = max(0, _clean_quantity(qty, clamp=True))
        return Cart(table)

    def quantity(self, event_type: str, ticket_type: str) -> int:
        return self._quantities.get(event_type, {}).get(ticket_type, 0)

    def event_quantities(self, event_type: str) -> Mapping[str, int]:
        """Return the read-only ticket type -> quantity row for one event."""
        return self._quantities.get(event_type, MappingProxyType({}))

    def entries(self) -> Iterator[tuple[tuple[str, str], int]]:
        """Yield ``((event_type, ticket_type), qty)`` for every entry, zeros included."""
        for event_type, row in self._quantities.items():
            for ticket_type, qty in row.items():
                yield (event_type, ticket_type), qty

    def selected(self) -> Iterator[tuple[tuple[str, str], int]]:
        """Yield only the entries with a positive quantity."""
        return ((key, qty) for key, qty in self.entries() if qty > 0)

    def has_any_ticket_for(self, event_type: str) -> bool:
        """Return whether the buyer holds a ticket that admits them to *event_type*.

        The all-access early bird pass counts toward every event.
        """
        if any(qty > 0 for qty in self.event_quantities(event_type).values()):
            return True
        return self.quantity(EventType.ALL_ACCESS, TicketType.EARLY_BIRD) > 0

    def total_quantity(self) -> int:
        return sum(qty for _, qty in self.selected())

    def total_original_amount(self, catalog: PriceCatalog) -> Decimal:
        """Return the undiscounted total of every catalog-priced entry."""
        total = Decimal("0.00")
        for (event_type, ticket_type), qty in self.selected():
            price = catalog.price(event_type, ticket_type)
            if price is not None:
                total += price * qty
        return total


def _clean_quantity(qty: object, *, clamp: bool = False) -> int:
    """Validate a quantity is an integer and, unless clamping, non-negative."""
    if isinstance(qty, bool) or not isinstance(qty, int):
        msg = f"Quantity must be an integer, got {qty!r}"
        raise TypeError(msg)
    if qty < 0 and not clamp:
        msg = f"Quantity must not be negative, got {qty}"
        raise ValueError(msg)
    return qty
