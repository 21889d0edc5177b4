"""Typed configuration for festival-tickets.

Reads a single ``FESTIVAL_TICKETS`` dict from Django settings and exposes it
as composed, frozen dataclasses with sensible defaults.

Usage::

    from festival_tickets.settings import get_config

    config = get_config()
    config.checkout.base_url
    config.discounts.points_per_unit
    config.currency
"""

import functools
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from django.conf import settings
from django.test.signals import setting_changed


@dataclass(frozen=True, slots=True)
class CheckoutConfig:
    """Order service endpoint configuration."""

    base_url: str = ""
    endpoint_path: str = "/api/festival-tickets/calculate/{event_slug}"
    timeout: float | None = None


@dataclass(frozen=True, slots=True)
class DiscountConfig:
    """Conversion rates for the karma and mana discounts."""

    points_per_unit: int = 100
    all_access_flat_amount: Decimal = Decimal(55)
    upgrade_flat_amount: Decimal = Decimal(55)
    manifest_percentage: Decimal = Decimal(10)


@dataclass(frozen=True, slots=True)
class FeaturesConfig:
    """Feature toggles for the two discount kinds.

    Both are enabled by default. Set to ``False`` in
    ``FESTIVAL_TICKETS['features']`` to disable.
    """

    point_discount_enabled: bool = True
    flat_discount_enabled: bool = True


@dataclass(frozen=True, slots=True)
class StoreConfig:
    """Top-level festival-tickets configuration."""

    checkout: CheckoutConfig = field(default_factory=CheckoutConfig)
    discounts: DiscountConfig = field(default_factory=DiscountConfig)
    features: FeaturesConfig = field(default_factory=FeaturesConfig)
    event_slug: str = "festival-season"
    catalog_path: str | None = None
    currency: str = "USD"
    currency_symbol: str = "$"


@functools.lru_cache(maxsize=1)
def get_config() -> StoreConfig:
    """Build and return the store configuration.

    Reads ``settings.FESTIVAL_TICKETS`` (a plain dict) and returns a frozen
    :class:`StoreConfig`.  The result is cached; the cache is cleared
    automatically when Django's ``setting_changed`` signal fires (e.g. inside
    ``override_settings``).
    """
    raw = getattr(settings, "FESTIVAL_TICKETS", {})
    if not isinstance(raw, Mapping):
        msg = "FESTIVAL_TICKETS must be a mapping (dict-like object)"
        raise TypeError(msg)
    raw_data = dict(raw)

    sections = {}
    for name in ("checkout", "discounts", "features"):
        section = raw_data.pop(name, {})
        if not isinstance(section, Mapping):
            msg = f"FESTIVAL_TICKETS['{name}'] must be a mapping (dict-like object)"
            raise TypeError(msg)
        sections[name] = dict(section)

    discounts_data = sections["discounts"]
    for key in ("all_access_flat_amount", "upgrade_flat_amount", "manifest_percentage"):
        if key in discounts_data:
            discounts_data[key] = _to_decimal(discounts_data[key], f"FESTIVAL_TICKETS['discounts']['{key}']")

    config = StoreConfig(
        checkout=CheckoutConfig(**sections["checkout"]),
        discounts=DiscountConfig(**discounts_data),
        features=FeaturesConfig(**sections["features"]),
        **raw_data,
    )
    _validate_store_config(config)
    return config


def _to_decimal(value: object, label: str) -> Decimal:
    """Coerce a numeric setting to ``Decimal`` without float artefacts."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        msg = f"{label} must be a number"
        raise TypeError(msg)
    return Decimal(str(value))


def _validate_store_config(config: StoreConfig) -> None:
    """Validate high-impact configuration values with clear error messages."""
    if not isinstance(config.event_slug, str) or not config.event_slug.strip():
        msg = "FESTIVAL_TICKETS['event_slug'] must be a non-empty string"
        raise ValueError(msg)
    if not isinstance(config.currency, str) or not config.currency.strip():
        msg = "FESTIVAL_TICKETS['currency'] must be a non-empty string"
        raise ValueError(msg)
    if not isinstance(config.currency_symbol, str) or not config.currency_symbol.strip():
        msg = "FESTIVAL_TICKETS['currency_symbol'] must be a non-empty string"
        raise ValueError(msg)
    if "{event_slug}" not in config.checkout.endpoint_path:
        msg = "FESTIVAL_TICKETS['checkout']['endpoint_path'] must contain '{event_slug}'"
        raise ValueError(msg)
    timeout = config.checkout.timeout
    if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0):
        msg = "FESTIVAL_TICKETS['checkout']['timeout'] must be a positive number or None"
        raise ValueError(msg)
    points = config.discounts.points_per_unit
    if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
        msg = "FESTIVAL_TICKETS['discounts']['points_per_unit'] must be a positive integer"
        raise ValueError(msg)
    for key in ("all_access_flat_amount", "upgrade_flat_amount"):
        if getattr(config.discounts, key) < 0:
            msg = f"FESTIVAL_TICKETS['discounts']['{key}'] must be non-negative"
            raise ValueError(msg)
    if not Decimal(0) <= config.discounts.manifest_percentage <= Decimal(100):
        msg = "FESTIVAL_TICKETS['discounts']['manifest_percentage'] must be between 0 and 100"
        raise ValueError(msg)
    for key in ("point_discount_enabled", "flat_discount_enabled"):
        if not isinstance(getattr(config.features, key), bool):
            msg = f"FESTIVAL_TICKETS['features']['{key}'] must be a boolean"
            raise TypeError(msg)


def _clear_config_cache(*, setting: str, **kwargs: object) -> None:  # noqa: ARG001
    """Clear the cached config when Django settings change during tests."""
    if setting == "FESTIVAL_TICKETS":
        get_config.cache_clear()


setting_changed.connect(_clear_config_cache, dispatch_uid="festival_tickets.settings.clear_config_cache")
