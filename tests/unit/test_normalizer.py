"""Unit tests for unit/value normalization."""
import pytest

from catalog_enricher.models.catalog import NA
from catalog_enricher.services.extraction.normalizer import (
    has_inch_unit,
    has_metric_unit,
    normalize_value,
    parse_inches,
)


class TestNormalizeValue:
    """Test canonical measurement rendering."""

    @pytest.mark.parametrize("raw", [None, "", "   ", "\t\n"])
    def test_empty_input_is_sentinel(self, raw):
        assert normalize_value(raw) == NA

    def test_metric_value_is_trimmed(self):
        assert normalize_value("  10.00 mm ") == "10.00 mm"

    def test_unitless_count_is_kept(self):
        assert normalize_value("4") == "4"

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("1 in", "25.40 mm"),
            ("0.5 in", "12.70 mm"),
            ('0.5"', "12.70 mm"),
            ("0,5 inch", "12.70 mm"),
            ("1/2 inch", "12.70 mm"),
            ("1 1/2 in", "38.10 mm"),
            ("2 inches", "50.80 mm"),
        ],
    )
    def test_inches_are_converted(self, raw, expected):
        assert normalize_value(raw) == expected

    def test_value_with_both_units_keeps_metric_text(self):
        assert normalize_value("6.00 mm (0.236 in)") == "6.00 mm (0.236 in)"

    def test_metric_only_rejects_inches(self):
        assert normalize_value("0.5 in", metric_only=True) == NA
        assert normalize_value('1"', metric_only=True) == NA

    def test_metric_only_keeps_millimetres(self):
        assert normalize_value("12 mm", metric_only=True) == "12 mm"

    @pytest.mark.parametrize(
        "raw", ["10 mm", "1 in", "0.5\"", "4", "#NA", "", "1 1/2 in", "3,5 mm"]
    )
    def test_idempotent(self, raw):
        once = normalize_value(raw)
        assert normalize_value(once) == once

    @pytest.mark.parametrize("raw", ["1 in", "0.25 inch", "3/8\"", "12 mm"])
    def test_metric_only_never_yields_inch(self, raw):
        value = normalize_value(raw, metric_only=True)
        assert value == NA or not has_inch_unit(value)


class TestUnitDetection:
    """Test unit token detection."""

    def test_metric(self):
        assert has_metric_unit("10 mm")
        assert not has_metric_unit("10 in")

    def test_inch_tokens(self):
        assert has_inch_unit("10 in")
        assert has_inch_unit("10inch")
        assert has_inch_unit('3/8"')
        assert not has_inch_unit("10 mm")
        assert not has_inch_unit("Corner radius")

    def test_parse_inches(self):
        assert parse_inches("1 1/2 in") == pytest.approx(1.5)
        assert parse_inches("3/8 in") == pytest.approx(0.375)
        assert parse_inches("0,75 in") == pytest.approx(0.75)
        assert parse_inches("in") is None
