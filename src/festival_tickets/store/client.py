"""HTTP client for the festival order service.

Provides :class:`CheckoutClient`, which posts a checkout request body to the
event-scoped order endpoint and returns the payment page URL the buyer
should be redirected to. There is no retry; a failed call surfaces as
:class:`~festival_tickets.store.errors.CheckoutTransportError` and leaves
the caller's cart and attendee untouched.
"""

import logging
from typing import Any

import httpx

from festival_tickets.store.errors import CheckoutTransportError

logger = logging.getLogger(__name__)


class CheckoutClient:
    """HTTP client for creating checkout sessions.

    Args:
        event_slug: The event slug the order is placed for.
        base_url: Root URL of the order service.
        endpoint_path: Path template containing ``{event_slug}``.
        timeout: Seconds to wait for the service, or ``None`` to wait
            indefinitely.

    Example::

        client = CheckoutClient("festival-season", base_url="https://tickets.example.com")
        url = client.create_checkout(payload)
    """

    def __init__(
        self,
        event_slug: str,
        *,
        base_url: str,
        endpoint_path: str = "/api/festival-tickets/calculate/{event_slug}",
        timeout: float | None = None,
    ) -> None:
        if not base_url:
            msg = "CheckoutClient requires a base_url"
            raise ValueError(msg)
        self.event_slug = event_slug
        self.base_url = base_url.rstrip("/")
        self.url = f"{self.base_url}{endpoint_path.format(event_slug=event_slug)}"
        self.timeout = timeout
        self.headers: dict[str, str] = {"Accept": "application/json"}

    def create_checkout(self, payload: dict[str, Any]) -> str:
        """Create a checkout session and return its redirect URL.

        Args:
            payload: The request body built by
                :func:`~festival_tickets.store.services.checkout.build_checkout_payload`.

        Returns:
            The ``checkoutUrl`` from the service response.

        Raises:
            CheckoutTransportError: If the service is unreachable, returns a
                non-2xx status, returns a body that is not JSON, or omits
                ``checkoutUrl``.
        """
        logger.debug("Posting checkout for %d ticket lines to %s", len(payload.get("tickets", [])), self.url)
        with httpx.Client(timeout=self.timeout, headers=self.headers) as client:
            try:
                response = client.post(self.url, json=payload)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                logger.warning("Checkout request rejected with %s", exc.response.status_code)
                msg = f"Failed to create checkout session: {exc.response.status_code} for URL {exc.request.url}"
                raise CheckoutTransportError(msg) from exc
            except httpx.RequestError as exc:
                logger.warning("Checkout request to %s failed: %s", self.url, exc)
                msg = f"Order service connection error for URL {self.url}: {exc}"
                raise CheckoutTransportError(msg) from exc

        try:
            data = response.json()
        except ValueError as exc:
            msg = f"Order service returned a non-JSON response for URL {self.url}"
            raise CheckoutTransportError(msg) from exc

        checkout_url = data.get("checkoutUrl") if isinstance(data, dict) else None
        if not isinstance(checkout_url, str) or not checkout_url:
            msg = "No checkout URL received"
            raise CheckoutTransportError(msg)
        return checkout_url
