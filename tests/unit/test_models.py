"""Unit tests for Pydantic models: records, results and progress."""
import pytest
from pydantic import ValidationError

from catalog_enricher.models.catalog import NA, SLOT_FIELDS, SupplierId, ToolFamily, ToolType
from catalog_enricher.models.progress import ProgressSnapshot
from catalog_enricher.models.record import ToolRecord, is_absent
from catalog_enricher.models.spec_result import SpecResult


class TestSpecResult:
    """Test SpecResult construction helpers."""

    def test_defaults_are_sentinel(self):
        result = SpecResult()
        assert all(value == NA for value in result.slots().values())
        assert list(result.slots()) == list(SLOT_FIELDS)
        assert result.success is False

    def test_failed(self):
        result = SpecResult.failed("Timeout")
        assert result.success is False
        assert result.error_message == "Timeout"
        assert not result.has_any_value()

    def test_all_na_is_success(self):
        result = SpecResult.all_na()
        assert result.success is True
        assert not result.has_any_value()

    def test_has_value(self):
        result = SpecResult(tool_diameter="10 mm")
        assert result.has_value("tool_diameter")
        assert not result.has_value("corner_radius")
        assert result.has_any_value()

    def test_frozen(self):
        result = SpecResult()
        with pytest.raises(ValidationError):
            result.tool_diameter = "1 mm"


class TestToolRecord:
    """Test derived classification and the fill-if-absent merge."""

    def test_derived_fields(self, make_record):
        record = make_record("SD1103-1000-035-10R1", "Solid Drill", "Seco Tools")
        assert record.supplier is SupplierId.SECO
        assert record.tool_type is ToolType.SOLID_DRILL
        assert record.tool_family is ToolFamily.DRILLING
        assert record.is_supported_type

    def test_unsupported_type(self, make_record):
        record = make_record(type_of_tool="Facemill")
        assert not record.is_supported_type
        assert record.tool_family is None

    @pytest.mark.parametrize("value", [None, "", "   ", "#NA", " #NA "])
    def test_is_absent(self, value):
        assert is_absent(value)

    def test_is_not_absent(self):
        assert not is_absent("10 mm")
        assert not is_absent("-")

    def test_merge_never_overwrites(self, make_record):
        record = make_record(tool_diameter="8 mm", overall_length="  ")
        result = SpecResult(tool_diameter="10 mm", overall_length="50 mm", success=True)

        written = record.merge(result)

        assert record.tool_diameter == "8 mm"
        assert record.overall_length == "50 mm"
        assert "tool_diameter" not in written
        assert "overall_length" in written

    def test_merge_fills_sentinel_slot(self, make_record):
        record = make_record(corner_radius=NA)
        record.merge(SpecResult(corner_radius="0.5 mm"))
        assert record.corner_radius == "0.5 mm"

    def test_merge_keeps_existing_sentinel(self, make_record):
        record = make_record(corner_radius=NA)
        written = record.merge(SpecResult())
        assert record.corner_radius == NA
        assert "corner_radius" not in written

    def test_merge_writes_sentinel_into_empty_slot(self, make_record):
        record = make_record()
        record.merge(SpecResult.failed("Could not load search page"))
        assert all(getattr(record, name) == NA for name in SLOT_FIELDS)

    def test_missing_slots(self, make_record):
        record = make_record(tool_diameter="10 mm", edge_count="2")
        assert record.missing_slots() == [
            "cutting_length",
            "corner_radius",
            "overall_length",
            "shank_bore_diameter",
        ]


class TestProgressSnapshot:
    """Test derived progress fields."""

    def test_percent(self):
        assert ProgressSnapshot(total=3, completed=1).percent == 33
        assert ProgressSnapshot(total=4, completed=4).percent == 100

    def test_empty_job(self):
        snapshot = ProgressSnapshot(total=0)
        assert snapshot.percent == 0
        assert snapshot.is_finished

    def test_serializes_derived_fields(self):
        data = ProgressSnapshot(total=2, completed=1, success_count=1).model_dump()
        assert data["percent"] == 50
        assert data["is_finished"] is False
        assert data["current_item"] is None
