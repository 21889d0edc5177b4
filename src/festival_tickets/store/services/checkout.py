"""Checkout request builder for the ticket store.

Validates attendee completeness against the cart and assembles the JSON
body sent to the order service. Nothing here touches the network; see
:mod:`festival_tickets.store.client` for transport.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from festival_tickets.store.cart import Cart
from festival_tickets.store.catalog import EventType
from festival_tickets.store.errors import AttendeeValidationError
from festival_tickets.store.forms import AttendeeForm
from festival_tickets.store.services.discount import AppliedDiscount, FlatGrant, PointGrant

# Events that ask the attendee how they heard about them.
HEARD_FROM_FIELDS: dict[str, str] = {
    EventType.MANIFEST: "heard_from_manifest",
    EventType.LESSONLINE: "heard_from_lessonline",
}


@dataclass(frozen=True)
class AttendeeInfo:
    """Details of the single attendee on an order."""

    first_name: str = ""
    last_name: str = ""
    badge_name: str = ""
    manifold_username: str = ""
    lw_username: str = ""
    dietary_preferences: tuple[str, ...] = field(default_factory=tuple)
    dietary_other: str = ""
    heard_from_manifest: str = ""
    heard_from_lessonline: str = ""
    under_18: str = ""
    bringing_kids: str = ""

    @classmethod
    def from_form_data(cls, data: dict[str, Any]) -> "AttendeeInfo":
        """Build an attendee from raw form input.

        Raises:
            AttendeeValidationError: If a field has an unrecognised value
                (e.g. an unknown dietary preference).
        """
        form = AttendeeForm(data=data)
        if not form.is_valid():
            raise AttendeeValidationError([f"{name}: {' '.join(errors)}" for name, errors in form.errors.items()])
        cleaned = dict(form.cleaned_data)
        cleaned["dietary_preferences"] = tuple(cleaned["dietary_preferences"])
        return cls(**cleaned)

    def to_payload(self) -> dict[str, Any]:
        """Return the attendee in the order service's camelCase shape."""
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "badgeName": self.badge_name,
            "manifoldUsername": self.manifold_username,
            "lwUsername": self.lw_username,
            "dietaryPreferences": list(self.dietary_preferences),
            "dietaryOther": self.dietary_other,
            "heardFromManifest": self.heard_from_manifest,
            "heardFromLessOnline": self.heard_from_lessonline,
            "under18": self.under_18,
            "bringingKids": self.bringing_kids,
        }


def missing_attendee_fields(cart: Cart, attendee: AttendeeInfo) -> list[str]:
    """Return the names of required attendee fields that are still empty.

    "Heard from" answers are only required for events the cart admits the
    attendee to (see :meth:`Cart.has_any_ticket_for`).
    """
    missing = [
        name
        for name in ("first_name", "last_name", "under_18", "bringing_kids")
        if not getattr(attendee, name).strip()
    ]
    if not attendee.dietary_preferences:
        missing.append("dietary_preferences")
    for event_type, name in HEARD_FROM_FIELDS.items():
        if cart.has_any_ticket_for(event_type) and not getattr(attendee, name).strip():
            missing.append(name)
    return missing


def validate_attendee(cart: Cart, attendee: AttendeeInfo) -> None:
    """Raise when the attendee record is incomplete for this cart.

    Raises:
        AttendeeValidationError: Listing the missing fields.
    """
    missing = missing_attendee_fields(cart, attendee)
    if missing:
        raise AttendeeValidationError(
            f"Please fill in all required fields: {', '.join(missing)}.",
            code="incomplete_attendee",
            params={"missing": missing},
        )


def is_valid(cart: Cart, attendee: AttendeeInfo) -> bool:
    """Return whether *attendee* is complete for *cart*."""
    return not missing_attendee_fields(cart, attendee)


def is_checkout_enabled(cart: Cart, attendee: AttendeeInfo) -> bool:
    """Checkout needs at least one ticket and a complete attendee."""
    return cart.total_quantity() > 0 and is_valid(cart, attendee)


def build_checkout_payload(
    cart: Cart,
    attendee: AttendeeInfo,
    applied: list[AppliedDiscount] | tuple[AppliedDiscount, ...] = (),
) -> dict[str, Any]:
    """Assemble the order service request body.

    Args:
        cart: The cart being purchased.
        attendee: The attendee; must be complete for *cart*.
        applied: Discounts applied to the cart; zero amounts are omitted.

    Returns:
        ``{"tickets": [...], "attendees": [...], "discount": {...} | None}``.

    Raises:
        AttendeeValidationError: If the attendee is incomplete.
    """
    validate_attendee(cart, attendee)

    tickets = [
        {"eventType": str(event_type), "type": str(ticket_type), "quantity": qty}
        for (event_type, ticket_type), qty in cart.selected()
    ]

    discounts = [_discount_payload(discount) for discount in applied if discount.amount > 0]
    return {
        "tickets": tickets,
        "attendees": [attendee.to_payload()],
        "discount": {"discounts": discounts} if discounts else None,
    }


def _discount_payload(discount: AppliedDiscount) -> dict[str, Any]:
    amount = float(discount.amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    match discount.grant:
        case PointGrant(source_id=username, points=points):
            return {"type": str(discount.kind), "username": username, "points": _json_number(points), "amount": amount}
        case FlatGrant(source_id=username):
            return {"type": str(discount.kind), "username": username, "amount": amount}
    msg = f"Unsupported discount grant: {discount.grant!r}"
    raise TypeError(msg)


def _json_number(value: Decimal) -> int | float:
    """Render whole numbers as ints so ``1500`` points stays ``1500``."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)
