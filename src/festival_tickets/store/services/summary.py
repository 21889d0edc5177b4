"""Selection summary for the ticket store.

Walks the cart and the applied discounts and produces the ordered,
discount-attributed line items shown to the buyer, along with the subtotal
and the payable total. Every selected, catalog-priced ticket appears exactly
once.
"""

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal

from festival_tickets.settings import get_config
from festival_tickets.store.cart import Cart
from festival_tickets.store.catalog import EventType, PriceCatalog, TicketType, display_name
from festival_tickets.store.services.discount import (
    AppliedDiscount,
    DiscountKind,
    FlatGrant,
    PointGrant,
    manifest_unit_discount,
)

_ZERO = Decimal("0.00")
_CENT = Decimal("0.01")


@dataclass
class LineItem:
    """Pricing breakdown for a single selected ticket type."""

    event_type: str
    ticket_type: str
    description: str
    quantity: int
    unit_price_original: Decimal
    unit_price_effective: Decimal
    discounted: bool
    discount_per_unit: Decimal
    discount_kind: str | None = None

    @property
    def line_original(self) -> Decimal:
        return self.unit_price_original * self.quantity

    @property
    def line_discount(self) -> Decimal:
        return self.discount_per_unit * self.quantity

    @property
    def line_total(self) -> Decimal:
        return self.unit_price_effective * self.quantity


@dataclass
class Summary:
    """Full pricing summary of a cart including applied discounts."""

    items: list[LineItem]
    subtotal: Decimal
    point_discount: Decimal
    flat_discount: Decimal

    @property
    def discount(self) -> Decimal:
        return self.point_discount + self.flat_discount

    @property
    def total(self) -> Decimal:
        return max(self.subtotal - self.discount, _ZERO)


@dataclass
class _Priced:
    ticket_type: str
    quantity: int
    price: Decimal


def build_summary(cart: Cart, catalog: PriceCatalog, *applied: AppliedDiscount) -> Summary:
    """Compute the ordered line items and totals for *cart*.

    Allocation order:

    1. With a karma (point) discount, LessOnline tickets are discounted
       most-expensive first until the amount is used up, then any remainder
       moves on to All-Access tickets in the same order. Every LessOnline
       ticket is listed as discounted, even once the amount runs out. Each
       line's share is spread per unit in whole cents, rounded down; the
       leftover cents carry on to the next ticket.
    2. With a mana (flat) discount, Manifest tickets get the percentage off
       (volunteer excepted), All-Access tickets not already discounted and
       the LessOnline upgrade get the fixed per-ticket reduction while any
       mana amount remains, then Summer Camp tickets follow at full price.
       When a karma discount is also applied, the upgrade is listed once,
       under karma, so the mana amount includes an upgrade reduction that
       no line attributes to mana.
    3. Without a mana discount the remaining All-Access, Manifest, and Summer
       Camp tickets are listed at full price, in that order.

    The payable total is based on the applied amounts, not on the per-line
    reductions: ``max(0, subtotal - point - flat)``.

    Args:
        cart: The cart to summarise.
        catalog: Unit prices for the session.
        *applied: Applied discounts, at most one per kind.

    Returns:
        A :class:`Summary` with line items, subtotal, discounts, and total.
    """
    point_amount, flat_amount = _split_applied(applied)
    discounts = get_config().discounts

    items: list[LineItem] = []
    point_rendered: set[str] = set()

    if point_amount > 0:
        remaining = point_amount
        for entry in _by_price_descending(_priced(cart, catalog, EventType.LESSONLINE)):
            item_discount = min(max(remaining, _ZERO), entry.price * entry.quantity)
            per_unit = _per_unit_share(item_discount, entry.quantity)
            items.append(_discounted(EventType.LESSONLINE, entry, per_unit, DiscountKind.POINT))
            remaining -= per_unit * entry.quantity

        for entry in _by_price_descending(_priced(cart, catalog, EventType.ALL_ACCESS)):
            if remaining <= 0:
                break
            per_unit = _per_unit_share(min(remaining, entry.price * entry.quantity), entry.quantity)
            if per_unit <= 0:
                continue
            items.append(_discounted(EventType.ALL_ACCESS, entry, per_unit, DiscountKind.POINT))
            point_rendered.add(entry.ticket_type)
            remaining -= per_unit * entry.quantity
    else:
        for entry in _priced(cart, catalog, EventType.LESSONLINE):
            if flat_amount > 0 and entry.ticket_type == TicketType.UPGRADE:
                continue
            items.append(_full_price(EventType.LESSONLINE, entry))

    all_access_left = [
        entry for entry in _priced(cart, catalog, EventType.ALL_ACCESS) if entry.ticket_type not in point_rendered
    ]

    if flat_amount > 0:
        remaining = flat_amount
        for entry in _priced(cart, catalog, EventType.MANIFEST):
            if entry.ticket_type == TicketType.VOLUNTEER:
                items.append(_full_price(EventType.MANIFEST, entry))
                continue
            per_unit = manifest_unit_discount(entry.price)
            items.append(_discounted(EventType.MANIFEST, entry, per_unit, DiscountKind.FLAT))
            remaining -= per_unit * entry.quantity

        for entry in all_access_left:
            if remaining > 0:
                per_unit = discounts.all_access_flat_amount
                items.append(_discounted(EventType.ALL_ACCESS, entry, per_unit, DiscountKind.FLAT))
                remaining -= per_unit * entry.quantity
            else:
                items.append(_full_price(EventType.ALL_ACCESS, entry))

        if point_amount <= 0:
            for entry in _priced(cart, catalog, EventType.LESSONLINE):
                if entry.ticket_type != TicketType.UPGRADE:
                    continue
                if remaining > 0:
                    per_unit = discounts.upgrade_flat_amount
                    items.append(_discounted(EventType.LESSONLINE, entry, per_unit, DiscountKind.FLAT))
                    remaining -= per_unit * entry.quantity
                else:
                    items.append(_full_price(EventType.LESSONLINE, entry))

        items.extend(_full_price(EventType.SUMMER_CAMP, entry) for entry in _priced(cart, catalog, EventType.SUMMER_CAMP))
    else:
        items.extend(_full_price(EventType.ALL_ACCESS, entry) for entry in all_access_left)
        for event_type in (EventType.MANIFEST, EventType.SUMMER_CAMP):
            items.extend(_full_price(event_type, entry) for entry in _priced(cart, catalog, event_type))

    return Summary(
        items=items,
        subtotal=cart.total_original_amount(catalog),
        point_discount=point_amount,
        flat_discount=flat_amount,
    )


def _split_applied(applied: tuple[AppliedDiscount, ...]) -> tuple[Decimal, Decimal]:
    """Return ``(point_amount, flat_amount)``; each kind may appear once."""
    point_amount: Decimal | None = None
    flat_amount: Decimal | None = None
    for discount in applied:
        match discount.grant:
            case PointGrant():
                if point_amount is not None:
                    msg = "Only one karma discount can be applied at a time"
                    raise ValueError(msg)
                point_amount = discount.amount
            case FlatGrant():
                if flat_amount is not None:
                    msg = "Only one mana discount can be applied at a time"
                    raise ValueError(msg)
                flat_amount = discount.amount
    return point_amount or _ZERO, flat_amount or _ZERO


def _priced(cart: Cart, catalog: PriceCatalog, event_type: str) -> list[_Priced]:
    """Return selected tickets of one event that the catalog prices, in cart order."""
    entries = []
    for ticket_type, qty in cart.event_quantities(event_type).items():
        price = catalog.price(event_type, ticket_type)
        if qty > 0 and price is not None:
            entries.append(_Priced(ticket_type=ticket_type, quantity=qty, price=price))
    return entries


def _per_unit_share(amount: Decimal, quantity: int) -> Decimal:
    """Split *amount* evenly over *quantity* units, rounded down to whole cents.

    The per-unit figures multiply back to the line exactly; the uneven
    remainder is left in the budget for the next ticket.
    """
    return (amount / quantity).quantize(_CENT, rounding=ROUND_DOWN)


def _by_price_descending(entries: list[_Priced]) -> list[_Priced]:
    # sorted() is stable, so equal prices keep cart order
    return sorted(entries, key=lambda entry: entry.price, reverse=True)


def _full_price(event_type: str, entry: _Priced) -> LineItem:
    return LineItem(
        event_type=event_type,
        ticket_type=entry.ticket_type,
        description=display_name(event_type, entry.ticket_type),
        quantity=entry.quantity,
        unit_price_original=entry.price,
        unit_price_effective=entry.price,
        discounted=False,
        discount_per_unit=_ZERO,
    )


def _discounted(event_type: str, entry: _Priced, per_unit: Decimal, kind: str) -> LineItem:
    return LineItem(
        event_type=event_type,
        ticket_type=entry.ticket_type,
        description=display_name(event_type, entry.ticket_type),
        quantity=entry.quantity,
        unit_price_original=entry.price,
        unit_price_effective=entry.price - per_unit,
        discounted=True,
        discount_per_unit=per_unit,
        discount_kind=kind,
    )
