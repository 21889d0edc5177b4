"""Tests for festival_tickets.store.session."""

from decimal import Decimal
from unittest.mock import Mock

import pytest
from django.core.exceptions import ImproperlyConfigured, ValidationError
from django.test import override_settings

from festival_tickets.store.client import CheckoutClient
from festival_tickets.store.errors import AttendeeValidationError, CheckoutTransportError, InputValidationError
from festival_tickets.store.services.discount import SlotStatus
from festival_tickets.store.session import TicketStoreSession


def _fill_attendee(session):
    session.update_attendee(
        first_name="Ada",
        last_name="Lovelace",
        dietary_preferences=["vegetarian"],
        heard_from_manifest="manifold",
        heard_from_lessonline="lesswrong",
        under_18="no",
        bringing_kids="no",
    )


def _mock_client(checkout_url="https://pay.example.com/x", *, error=None):
    client = Mock(spec=CheckoutClient)
    if error is not None:
        client.create_checkout.side_effect = error
    else:
        client.create_checkout.return_value = checkout_url
    return client


@pytest.fixture
def session(catalog):
    return TicketStoreSession(catalog)


class TestCart:
    def test_starts_empty(self, session):
        assert session.cart.total_quantity() == 0
        assert session.total == Decimal("0")
        assert session.checkout_enabled is False
        assert session.event_slug == "festival-season"

    def test_set_quantity_updates_total(self, session):
        session.set_quantity("lessonline", "early_bird", 1)
        session.set_quantity("manifest", "supporter", 2)

        assert session.total == Decimal("500")

    def test_rejects_ticket_not_in_catalog(self, session):
        with pytest.raises(ValidationError, match="not sold"):
            session.set_quantity("all_access", "volunteer", 1)


class TestAttendee:
    def test_update_attendee_enables_checkout(self, session):
        session.set_quantity("manifest", "supporter", 1)
        assert session.checkout_enabled is False

        _fill_attendee(session)

        assert session.checkout_enabled is True
        assert session.attendee.dietary_preferences == ("vegetarian",)

    def test_toggle_dietary_preference(self, session):
        session.set_dietary_preference("vegan", selected=True)
        session.set_dietary_preference("nut-free", selected=True)
        session.set_dietary_preference("vegan", selected=True)
        assert session.attendee.dietary_preferences == ("vegan", "nut-free")

        session.set_dietary_preference("vegan", selected=False)
        assert session.attendee.dietary_preferences == ("nut-free",)


class TestDiscounts:
    def test_apply_and_clear_point_discount(self, session):
        session.set_quantity("lessonline", "early_bird", 1)
        session.open_point_discount()

        amount = session.apply_point_discount("ada", "5000")

        assert amount == Decimal("50")
        assert session.point_slot.status == SlotStatus.APPLIED
        assert session.total == Decimal("150")

        session.clear_point_discount()

        assert session.point_slot.status == SlotStatus.NONE
        assert session.total == Decimal("200")

    def test_invalid_input_keeps_slot_editing(self, session):
        session.set_quantity("lessonline", "early_bird", 1)
        session.open_point_discount()

        with pytest.raises(InputValidationError):
            session.apply_point_discount("ada", "not-a-number")

        assert session.point_slot.status == SlotStatus.EDITING

    def test_cancel_flat_discount(self, session):
        session.open_flat_discount()
        session.cancel_flat_discount()

        assert session.flat_slot.status == SlotStatus.NONE

    def test_applied_amount_is_frozen_until_cleared(self, session):
        session.set_quantity("manifest", "supporter", 1)
        session.open_flat_discount()
        session.apply_flat_discount("fan")

        session.set_quantity("manifest", "supporter", 4)

        assert session.flat_slot.amount == Decimal("15")
        assert session.summary().flat_discount == Decimal("15")

        session.clear_flat_discount()
        session.open_flat_discount()
        session.apply_flat_discount("fan")

        assert session.flat_slot.amount == Decimal("60")

    def test_both_discounts_are_summed(self, session):
        session.set_quantity("lessonline", "early_bird", 1)
        session.set_quantity("manifest", "supporter", 1)
        session.open_point_discount()
        session.apply_point_discount("ada", "2000")
        session.open_flat_discount()
        session.apply_flat_discount("fan")

        summary = session.summary()

        assert summary.discount == Decimal("35")
        assert session.total == Decimal("315")
        assert [discount.kind for discount in session.applied_discounts] == ["karma", "mana"]

    @override_settings(FESTIVAL_TICKETS={"features": {"flat_discount_enabled": False}})
    def test_disabled_flat_discount_cannot_be_opened(self, session):
        with pytest.raises(ValidationError, match="flat_discount"):
            session.open_flat_discount()


class TestCheckout:
    def test_full_flow(self, session):
        session.client = _mock_client()
        session.set_quantity("lessonline", "early_bird", 1)
        session.open_point_discount()
        session.apply_point_discount("ada", "1500")
        _fill_attendee(session)

        url = session.checkout()

        assert url == "https://pay.example.com/x"
        (payload,) = session.client.create_checkout.call_args.args
        assert payload["tickets"] == [{"eventType": "lessonline", "type": "early_bird", "quantity": 1}]
        assert payload["discount"] == {"discounts": [{"type": "karma", "username": "ada", "points": 1500, "amount": 15.0}]}

    def test_empty_cart_cannot_check_out(self, session):
        _fill_attendee(session)

        with pytest.raises(ValidationError, match="empty cart"):
            session.checkout()

    def test_incomplete_attendee_cannot_check_out(self, session):
        session.set_quantity("manifest", "supporter", 1)

        with pytest.raises(AttendeeValidationError):
            session.checkout()

    def test_transport_failure_leaves_state_intact(self, session):
        session.client = _mock_client(error=CheckoutTransportError("Failed to create checkout session: 502"))
        session.set_quantity("manifest", "supporter", 1)
        session.open_flat_discount()
        session.apply_flat_discount("fan")
        _fill_attendee(session)
        cart_before = session.cart
        attendee_before = session.attendee

        with pytest.raises(CheckoutTransportError):
            session.checkout()

        assert session.cart == cart_before
        assert session.attendee == attendee_before
        assert session.flat_slot.status == SlotStatus.APPLIED

    def test_logs_created_checkout(self, session, caplog):
        caplog.set_level("INFO", logger="festival_tickets.store.session")
        session.client = _mock_client()
        session.set_quantity("manifest", "supporter", 2)
        _fill_attendee(session)

        session.checkout()

        assert "Created checkout for 2 tickets on 'festival-season'" in caplog.text

    @override_settings(FESTIVAL_TICKETS={"event_slug": "festival-season"})
    def test_missing_base_url_is_improperly_configured(self, session):
        session.set_quantity("manifest", "supporter", 1)
        _fill_attendee(session)

        with pytest.raises(ImproperlyConfigured, match="base_url"):
            session.checkout()

    def test_client_built_from_settings(self, session):
        client = session._get_client()

        assert client.url == "https://tickets.example.com/api/festival-tickets/calculate/festival-season"
        assert session._get_client() is client


class TestFromSettings:
    def test_loads_catalog_from_path(self, tmp_path):
        path = tmp_path / "catalog.toml"
        path.write_text('[prices.manifest]\nsupporter = 150\nvolunteer = 99.5\n', encoding="utf-8")

        with override_settings(FESTIVAL_TICKETS={"catalog_path": str(path)}):
            session = TicketStoreSession.from_settings(event_slug="manifest-2026")

        assert session.catalog.price("manifest", "supporter") == Decimal("150")
        assert session.event_slug == "manifest-2026"

    @override_settings(FESTIVAL_TICKETS={})
    def test_requires_catalog_path(self):
        with pytest.raises(ImproperlyConfigured, match="catalog_path"):
            TicketStoreSession.from_settings()
