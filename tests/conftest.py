from decimal import Decimal

import pytest

from festival_tickets.store.catalog import PriceCatalog
from festival_tickets.store.services.checkout import AttendeeInfo


@pytest.fixture
def catalog():
    return PriceCatalog(
        {
            "lessonline": {
                "early_bird": Decimal("200"),
                "supporter": Decimal("500"),
                "volunteer": Decimal("50"),
                "day_pass": Decimal("100"),
                "upgrade": Decimal("120"),
            },
            "manifest": {
                "early_bird": Decimal("300"),
                "supporter": Decimal("150"),
                "volunteer": Decimal("100"),
                "day_pass": Decimal("150"),
            },
            "summer_camp": {
                "early_bird": Decimal("600"),
                "day_pass": Decimal("150"),
            },
            "all_access": {
                "early_bird": Decimal("1000"),
                "supporter": Decimal("2000"),
            },
        }
    )


@pytest.fixture
def attendee():
    return AttendeeInfo(
        first_name="Ada",
        last_name="Lovelace",
        dietary_preferences=("vegan",),
        heard_from_manifest="manifold",
        heard_from_lessonline="lesswrong",
        under_18="no",
        bringing_kids="no",
    )
