"""One buyer's ticket store session.

:class:`TicketStoreSession` threads the immutable cart, the two discount
slots, and the attendee record through the pure pricing functions. Each
method is a single sequential state transition; nothing is persisted.
"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any

from django.core.exceptions import ImproperlyConfigured, ValidationError

from festival_tickets.config_loader import load_price_catalog
from festival_tickets.settings import get_config
from festival_tickets.store.cart import Cart
from festival_tickets.store.catalog import PriceCatalog
from festival_tickets.store.client import CheckoutClient
from festival_tickets.store.services.checkout import (
    AttendeeInfo,
    build_checkout_payload,
    is_checkout_enabled,
    validate_attendee,
)
from festival_tickets.store.services.discount import (
    AppliedDiscount,
    DiscountKind,
    DiscountSlot,
    parse_flat_grant,
    parse_point_grant,
)
from festival_tickets.store.services.summary import Summary, build_summary

logger = logging.getLogger(__name__)


class TicketStoreSession:
    """Cart, discounts, and attendee for a single buyer.

    Args:
        catalog: Prices for the session; treated as immutable.
        event_slug: Event the order is placed for. Defaults to
            ``FESTIVAL_TICKETS['event_slug']``.
        client: Order service client. Built from ``FESTIVAL_TICKETS['checkout']``
            on first checkout when omitted.
    """

    def __init__(
        self,
        catalog: PriceCatalog,
        *,
        event_slug: str | None = None,
        client: CheckoutClient | None = None,
    ) -> None:
        self.catalog = catalog
        self.event_slug = event_slug or get_config().event_slug
        self.client = client
        self.cart = Cart.from_catalog(catalog)
        self.attendee = AttendeeInfo()
        self.point_slot = DiscountSlot(kind=DiscountKind.POINT)
        self.flat_slot = DiscountSlot(kind=DiscountKind.FLAT)

    @classmethod
    def from_settings(cls, **kwargs: Any) -> "TicketStoreSession":
        """Start a session with the catalog at ``FESTIVAL_TICKETS['catalog_path']``."""
        path = get_config().catalog_path
        if not path:
            msg = "FESTIVAL_TICKETS['catalog_path'] must be set to load the price catalog"
            raise ImproperlyConfigured(msg)
        return cls(load_price_catalog(path), **kwargs)

    # -- Cart -----------------------------------------------------------------

    def set_quantity(self, event_type: str, ticket_type: str, qty: int) -> Cart:
        """Replace the quantity of one ticket type.

        Applied discounts keep their frozen amounts.

        Raises:
            ValidationError: If the catalog does not sell this ticket.
        """
        if not self.catalog.offers(event_type, ticket_type):
            raise ValidationError(f"Ticket type '{ticket_type}' is not sold for '{event_type}'.")
        self.cart = self.cart.set_quantity(event_type, ticket_type, qty)
        return self.cart

    # -- Attendee -------------------------------------------------------------

    def update_attendee(self, **changes: Any) -> AttendeeInfo:
        """Replace individual attendee fields, e.g. ``first_name="Ada"``."""
        if "dietary_preferences" in changes:
            changes["dietary_preferences"] = tuple(changes["dietary_preferences"])
        self.attendee = replace(self.attendee, **changes)
        return self.attendee

    def set_dietary_preference(self, preference: str, *, selected: bool) -> AttendeeInfo:
        """Tick or untick a single dietary preference, keeping selection order."""
        preferences = list(self.attendee.dietary_preferences)
        if selected and preference not in preferences:
            preferences.append(preference)
        elif not selected and preference in preferences:
            preferences.remove(preference)
        return self.update_attendee(dietary_preferences=preferences)

    # -- Discounts ------------------------------------------------------------

    def open_point_discount(self) -> None:
        self.point_slot = self.point_slot.open()

    def open_flat_discount(self) -> None:
        self.flat_slot = self.flat_slot.open()

    def cancel_point_discount(self) -> None:
        self.point_slot = self.point_slot.cancel()

    def cancel_flat_discount(self) -> None:
        self.flat_slot = self.flat_slot.cancel()

    def apply_point_discount(self, username: str, points: object) -> Decimal:
        """Validate karma input and freeze the resulting discount.

        Raises:
            InputValidationError: If the input is invalid; the slot stays in
                the editing state.
        """
        grant = parse_point_grant(username, points)
        self.point_slot = self.point_slot.apply(self.cart, self.catalog, grant)
        return self.point_slot.amount

    def apply_flat_discount(self, username: str) -> Decimal:
        """Validate mana input and freeze the resulting discount.

        Raises:
            InputValidationError: If the username is empty; the slot stays in
                the editing state.
        """
        grant = parse_flat_grant(username)
        self.flat_slot = self.flat_slot.apply(self.cart, self.catalog, grant)
        return self.flat_slot.amount

    def clear_point_discount(self) -> None:
        self.point_slot = self.point_slot.clear()

    def clear_flat_discount(self) -> None:
        self.flat_slot = self.flat_slot.clear()

    @property
    def applied_discounts(self) -> list[AppliedDiscount]:
        return [slot.applied for slot in (self.point_slot, self.flat_slot) if slot.applied is not None]

    # -- Display --------------------------------------------------------------

    def summary(self) -> Summary:
        return build_summary(self.cart, self.catalog, *self.applied_discounts)

    @property
    def total(self) -> Decimal:
        return self.summary().total

    @property
    def checkout_enabled(self) -> bool:
        return is_checkout_enabled(self.cart, self.attendee)

    # -- Checkout -------------------------------------------------------------

    def checkout_payload(self) -> dict[str, Any]:
        """Return the order service request body for the current state.

        Raises:
            AttendeeValidationError: If the attendee is incomplete.
        """
        return build_checkout_payload(self.cart, self.attendee, self.applied_discounts)

    def checkout(self) -> str:
        """Submit the order and return the payment page URL.

        Raises:
            ValidationError: If the cart is empty.
            AttendeeValidationError: If the attendee is incomplete.
            CheckoutTransportError: If the order service call fails. Cart,
                discounts, and attendee are left as they were.
        """
        if self.cart.total_quantity() == 0:
            raise ValidationError("Cannot check out an empty cart.")
        validate_attendee(self.cart, self.attendee)

        payload = self.checkout_payload()
        checkout_url = self._get_client().create_checkout(payload)
        logger.info(
            "Created checkout for %d tickets on '%s' (total %s)",
            self.cart.total_quantity(),
            self.event_slug,
            self.total,
        )
        return checkout_url

    def _get_client(self) -> CheckoutClient:
        if self.client is None:
            config = get_config().checkout
            if not config.base_url:
                msg = "FESTIVAL_TICKETS['checkout']['base_url'] must be set to submit orders"
                raise ImproperlyConfigured(msg)
            self.client = CheckoutClient(
                self.event_slug,
                base_url=config.base_url,
                endpoint_path=config.endpoint_path,
                timeout=config.timeout,
            )
        return self.client
