"""Feature toggle utilities for festival-tickets.

Provides functions to check whether the karma (point) and mana (flat)
discounts are offered in the current configuration. Toggles live in
``FESTIVAL_TICKETS["features"]`` in Django settings and require a server
restart to change.
"""

from django.core.exceptions import ValidationError

from festival_tickets.settings import get_config


def is_feature_enabled(feature: str) -> bool:
    """Check if a feature is enabled.

    Args:
        feature: Feature name (``"point_discount"`` or ``"flat_discount"``).

    Returns:
        ``True`` if the feature is enabled, ``False`` otherwise.

    Raises:
        ValueError: If the feature name is not recognized.
    """
    config = get_config().features
    attr = f"{feature}_enabled"

    if not hasattr(config, attr):
        msg = f"Unknown feature: {feature!r}"
        raise ValueError(msg)

    return getattr(config, attr)


def require_feature(feature: str) -> None:
    """Raise :class:`~django.core.exceptions.ValidationError` if a feature is disabled.

    Args:
        feature: Feature name to check.

    Raises:
        ValidationError: If the feature is disabled.
    """
    if not is_feature_enabled(feature):
        raise ValidationError(f"Feature {feature!r} is not enabled.")
