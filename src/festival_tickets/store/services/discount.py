"""Discount engine for the ticket store.

Two independent discounts can be applied to a cart:

* a **point** grant (LessWrong karma): ``points / points_per_unit`` off,
  capped at the spend on LessOnline and All-Access tickets;
* a **flat** grant (Manifold mana): 10% off Manifest tickets except
  volunteer, plus a fixed amount per All-Access ticket and per LessOnline
  upgrade.

Amount computations are pure functions of the cart, the catalog and the
grant. Each discount kind occupies a :class:`DiscountSlot`, which freezes
the computed amount when the grant is applied.
"""

import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import ClassVar

from django.core.exceptions import ValidationError
from django.db import models

from festival_tickets.features import require_feature
from festival_tickets.settings import get_config
from festival_tickets.store.cart import Cart
from festival_tickets.store.catalog import EventType, PriceCatalog, TicketType
from festival_tickets.store.errors import InputValidationError
from festival_tickets.store.forms import FlatGrantForm, PointGrantForm

logger = logging.getLogger(__name__)

POINT_ELIGIBLE_EVENTS: tuple[str, ...] = (EventType.LESSONLINE, EventType.ALL_ACCESS)


class DiscountKind(models.TextChoices):
    """The two discount sources, valued as the order service names them."""

    POINT = "karma", "LessWrong Karma"
    FLAT = "mana", "Manifold Mana"


@dataclass(frozen=True, slots=True)
class PointGrant:
    """A validated karma grant: who holds the points and how many."""

    kind: ClassVar[str] = DiscountKind.POINT

    source_id: str
    points: Decimal


@dataclass(frozen=True, slots=True)
class FlatGrant:
    """A validated mana grant; the amount depends only on the cart."""

    kind: ClassVar[str] = DiscountKind.FLAT

    source_id: str


DiscountGrant = PointGrant | FlatGrant


@dataclass(frozen=True, slots=True)
class AppliedDiscount:
    """A grant converted into a fixed amount at application time."""

    grant: DiscountGrant
    amount: Decimal

    @property
    def kind(self) -> str:
        return self.grant.kind

    @property
    def source_id(self) -> str:
        return self.grant.source_id


def parse_point_grant(username: str, points: object) -> PointGrant:
    """Validate raw karma input and return a :class:`PointGrant`.

    Args:
        username: The LessWrong username; must be non-empty.
        points: Karma points as typed by the buyer (string or number).

    Returns:
        The validated grant.

    Raises:
        InputValidationError: If the username is empty or the points value is
            missing, non-numeric, non-finite, or negative.
    """
    form = PointGrantForm(data={"username": username or "", "points": "" if points is None else str(points)})
    if not form.is_valid():
        raise InputValidationError("Please enter a valid username and karma points.", code="invalid_point_grant")
    return PointGrant(source_id=form.cleaned_data["username"], points=form.cleaned_data["points"])


def parse_flat_grant(username: str) -> FlatGrant:
    """Validate raw mana input and return a :class:`FlatGrant`.

    Raises:
        InputValidationError: If the username is empty.
    """
    form = FlatGrantForm(data={"username": username or ""})
    if not form.is_valid():
        raise InputValidationError("Please enter a valid Manifold username.", code="invalid_flat_grant")
    return FlatGrant(source_id=form.cleaned_data["username"])


def point_eligible_spend(cart: Cart, catalog: PriceCatalog) -> Decimal:
    """Return the undiscounted spend on LessOnline and All-Access tickets."""
    total = Decimal("0.00")
    for event_type in POINT_ELIGIBLE_EVENTS:
        for ticket_type, qty in cart.event_quantities(event_type).items():
            price = catalog.price(event_type, ticket_type)
            if qty > 0 and price is not None:
                total += price * qty
    return total


def compute_point_discount(cart: Cart, catalog: PriceCatalog, points: object, username: str) -> Decimal:
    """Return the karma discount amount for *points*.

    One currency unit per ``points_per_unit`` points (100 by default), never
    more than :func:`point_eligible_spend`.

    Raises:
        InputValidationError: If the grant input is invalid.
    """
    return grant_amount(cart, catalog, parse_point_grant(username, points))


def compute_flat_discount(cart: Cart, catalog: PriceCatalog, username: str) -> Decimal:
    """Return the mana discount amount for the current cart.

    Raises:
        InputValidationError: If the username is empty.
    """
    return grant_amount(cart, catalog, parse_flat_grant(username))


def grant_amount(cart: Cart, catalog: PriceCatalog, grant: DiscountGrant) -> Decimal:
    """Convert an already-validated grant into a discount amount."""
    match grant:
        case PointGrant(points=points):
            return _point_amount(cart, catalog, points)
        case FlatGrant():
            return _flat_amount(cart, catalog)
    msg = f"Unsupported discount grant: {grant!r}"
    raise TypeError(msg)


def _point_amount(cart: Cart, catalog: PriceCatalog, points: Decimal) -> Decimal:
    requested = Decimal(points) / get_config().discounts.points_per_unit
    return min(requested, point_eligible_spend(cart, catalog))


def _flat_amount(cart: Cart, catalog: PriceCatalog) -> Decimal:
    return (
        _manifest_percentage_discount(cart, catalog)
        + _all_access_flat_discount(cart, catalog)
        + _upgrade_flat_discount(cart, catalog)
    )


def manifest_unit_discount(unit_price: Decimal) -> Decimal:
    """Per-ticket mana discount on a non-volunteer Manifest ticket."""
    return unit_price * get_config().discounts.manifest_percentage / Decimal(100)


def _manifest_percentage_discount(cart: Cart, catalog: PriceCatalog) -> Decimal:
    total = Decimal("0.00")
    for ticket_type, qty in cart.event_quantities(EventType.MANIFEST).items():
        price = catalog.price(EventType.MANIFEST, ticket_type)
        if ticket_type == TicketType.VOLUNTEER or qty <= 0 or price is None:
            continue
        total += manifest_unit_discount(price) * qty
    return total


def _all_access_flat_discount(cart: Cart, catalog: PriceCatalog) -> Decimal:
    per_ticket = get_config().discounts.all_access_flat_amount
    total = Decimal("0.00")
    for ticket_type, qty in cart.event_quantities(EventType.ALL_ACCESS).items():
        if qty > 0 and catalog.offers(EventType.ALL_ACCESS, ticket_type):
            total += per_ticket * qty
    return total


def _upgrade_flat_discount(cart: Cart, catalog: PriceCatalog) -> Decimal:
    qty = cart.quantity(EventType.LESSONLINE, TicketType.UPGRADE)
    if qty <= 0 or not catalog.offers(EventType.LESSONLINE, TicketType.UPGRADE):
        return Decimal("0.00")
    return get_config().discounts.upgrade_flat_amount * qty


class SlotStatus(models.TextChoices):
    NONE = "none", "None"
    EDITING = "editing", "Editing"
    APPLIED = "applied", "Applied"


_FEATURE_FOR_KIND = {DiscountKind.POINT: "point_discount", DiscountKind.FLAT: "flat_discount"}


@dataclass(frozen=True, slots=True)
class DiscountSlot:
    """State of one discount kind: ``none -> editing -> applied -> none``.

    Slots are immutable; each transition returns a new slot. Once applied,
    the amount is frozen and is not recomputed when the cart changes. To
    change an applied discount the buyer must clear it first.
    """

    kind: str
    status: str = SlotStatus.NONE
    applied: AppliedDiscount | None = field(default=None)

    @property
    def amount(self) -> Decimal:
        if self.applied is None:
            return Decimal("0.00")
        return self.applied.amount

    def open(self) -> "DiscountSlot":
        """Start entering a grant."""
        if self.status == SlotStatus.APPLIED:
            raise ValidationError("Clear the applied discount before entering a new one.")
        require_feature(_FEATURE_FOR_KIND[self.kind])
        return replace(self, status=SlotStatus.EDITING)

    def cancel(self) -> "DiscountSlot":
        """Abandon the grant being entered."""
        if self.status != SlotStatus.EDITING:
            raise ValidationError("There is no discount being entered.")
        return replace(self, status=SlotStatus.NONE)

    def apply(self, cart: Cart, catalog: PriceCatalog, grant: DiscountGrant) -> "DiscountSlot":
        """Freeze *grant* into an :class:`AppliedDiscount` for the current cart.

        Raises:
            ValidationError: If the slot is not being edited, the grant is of
                the wrong kind, or the discount kind is disabled.
        """
        if self.status != SlotStatus.EDITING:
            raise ValidationError("Open the discount form before applying a discount.")
        if grant.kind != self.kind:
            raise ValidationError(f"A {grant.kind} grant cannot be applied to the {self.kind} discount.")
        require_feature(_FEATURE_FOR_KIND[self.kind])

        amount = grant_amount(cart, catalog, grant)
        logger.info("Applied %s discount of %s for '%s'", self.kind, amount, grant.source_id)
        return replace(self, status=SlotStatus.APPLIED, applied=AppliedDiscount(grant=grant, amount=amount))

    def clear(self) -> "DiscountSlot":
        """Remove an applied discount."""
        if self.status != SlotStatus.APPLIED:
            raise ValidationError("There is no applied discount to clear.")
        logger.info("Cleared %s discount of %s", self.kind, self.amount)
        return replace(self, status=SlotStatus.NONE, applied=None)
