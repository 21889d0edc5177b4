"""Tests for the discount feature toggles."""

import pytest
from django.core.exceptions import ValidationError
from django.test import override_settings

from festival_tickets.features import is_feature_enabled, require_feature
from festival_tickets.settings import get_config

ALL_FEATURES = ("point_discount", "flat_discount")


class TestFeaturesConfigDefaults:
    """Both discounts are offered by default."""

    def test_all_features_enabled_by_default(self) -> None:
        config = get_config().features
        for feature in ALL_FEATURES:
            assert getattr(config, f"{feature}_enabled") is True

    def test_features_config_is_frozen(self) -> None:
        config = get_config().features
        with pytest.raises(AttributeError):
            config.point_discount_enabled = False  # type: ignore[misc]


class TestIsFeatureEnabled:
    @pytest.mark.parametrize("feature", ALL_FEATURES)
    def test_returns_true_by_default(self, feature: str) -> None:
        assert is_feature_enabled(feature) is True

    @pytest.mark.parametrize("feature", ALL_FEATURES)
    def test_returns_false_when_disabled(self, feature: str) -> None:
        with override_settings(
            FESTIVAL_TICKETS={"features": {f"{feature}_enabled": False}},
        ):
            assert is_feature_enabled(feature) is False

    def test_disabling_one_leaves_the_other(self) -> None:
        with override_settings(
            FESTIVAL_TICKETS={"features": {"point_discount_enabled": False}},
        ):
            assert is_feature_enabled("flat_discount") is True

    def test_unknown_feature_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="Unknown feature"):
            is_feature_enabled("gift_cards")


class TestRequireFeature:
    def test_passes_when_enabled(self) -> None:
        require_feature("point_discount")

    def test_raises_when_disabled(self) -> None:
        with override_settings(
            FESTIVAL_TICKETS={"features": {"flat_discount_enabled": False}},
        ):
            with pytest.raises(ValidationError, match="flat_discount"):
                require_feature("flat_discount")
