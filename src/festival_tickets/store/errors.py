"""Exceptions raised by the ticket store.

Validation failures subclass Django's ``ValidationError`` so callers can
surface ``messages`` the same way they do for form errors. Upstream
failures from the order service are ``RuntimeError`` subclasses.
"""

from django.core.exceptions import ValidationError


class InputValidationError(ValidationError):
    """Malformed or missing discount-grant input (username, points)."""


class AttendeeValidationError(ValidationError):
    """Required attendee fields are missing; checkout must stay disabled."""


class CheckoutTransportError(RuntimeError):
    """The order service could not be reached or returned an unusable response."""
