from decimal import Decimal
from pathlib import Path

import pytest

from festival_tickets.config_loader import load_price_catalog


def test_load_price_catalog_parses_prices_as_decimal(tmp_path):
    catalog_file = tmp_path / "catalog.toml"
    catalog_file.write_text("""[prices.lessonline]
early_bird = 200
day_pass = 99.95

[prices.all_access]
early_bird = 1000
""")

    catalog = load_price_catalog(catalog_file)

    assert isinstance(catalog.price("lessonline", "day_pass"), Decimal)
    assert catalog.price("lessonline", "day_pass") == Decimal("99.95")
    assert catalog.price("all_access", "early_bird") == Decimal("1000")
    assert list(catalog) == ["lessonline", "all_access"]


def test_load_price_catalog_accepts_str_path(tmp_path):
    catalog_file = tmp_path / "catalog.toml"
    catalog_file.write_text("[prices.manifest]\nsupporter = 150\n")

    assert load_price_catalog(str(catalog_file)).offers("manifest", "supporter")


def test_load_price_catalog_file_not_found(tmp_path):
    missing = tmp_path / "does_not_exist.toml"

    with pytest.raises(FileNotFoundError, match="Price catalog file not found"):
        load_price_catalog(missing)


def test_load_price_catalog_invalid_toml(tmp_path):
    catalog_file = tmp_path / "catalog.toml"
    catalog_file.write_text("this is [[[not valid toml")

    with pytest.raises(ValueError, match="Invalid TOML in"):
        load_price_catalog(catalog_file)


def test_load_price_catalog_missing_prices_table(tmp_path):
    catalog_file = tmp_path / "catalog.toml"
    catalog_file.write_text("""[event]
name = "Not a catalog"
""")

    with pytest.raises(ValueError, match="Missing required \\[prices\\] table"):
        load_price_catalog(catalog_file)


def test_load_price_catalog_unknown_event_type(tmp_path):
    catalog_file = tmp_path / "catalog.toml"
    catalog_file.write_text("[prices.hackathon]\nday_pass = 10\n")

    with pytest.raises(ValueError, match=r"prices\.hackathon is not a known event type"):
        load_price_catalog(catalog_file)


def test_load_price_catalog_unknown_ticket_type(tmp_path):
    catalog_file = tmp_path / "catalog.toml"
    catalog_file.write_text("[prices.manifest]\nvip = 10\n")

    with pytest.raises(ValueError, match=r"prices\.manifest\.vip is not a known ticket type"):
        load_price_catalog(catalog_file)


def test_load_price_catalog_non_numeric_price(tmp_path):
    catalog_file = tmp_path / "catalog.toml"
    catalog_file.write_text('[prices.manifest]\nsupporter = "150"\n')

    with pytest.raises(ValueError, match="must be a number, got str"):
        load_price_catalog(catalog_file)


def test_load_price_catalog_boolean_price(tmp_path):
    catalog_file = tmp_path / "catalog.toml"
    catalog_file.write_text("[prices.manifest]\nsupporter = true\n")

    with pytest.raises(ValueError, match="must be a number, got bool"):
        load_price_catalog(catalog_file)


def test_load_price_catalog_negative_price(tmp_path):
    catalog_file = tmp_path / "catalog.toml"
    catalog_file.write_text("[prices.manifest]\nsupporter = -1\n")

    with pytest.raises(ValueError, match="must not be negative"):
        load_price_catalog(catalog_file)


def test_load_price_catalog_event_not_a_table(tmp_path):
    catalog_file = tmp_path / "catalog.toml"
    catalog_file.write_text("[prices]\nmanifest = 150\n")

    with pytest.raises(TypeError, match=r"prices\.manifest must be a mapping"):
        load_price_catalog(catalog_file)


def test_load_price_catalog_example_file():
    example = Path(__file__).resolve().parent.parent / "catalog.example.toml"

    catalog = load_price_catalog(example)

    assert catalog.offers("lessonline", "early_bird")
