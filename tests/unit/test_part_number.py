"""Unit tests for the part-number pattern decoder."""
import pytest

from catalog_enricher.models.catalog import NA, SupplierId, ToolFamily
from catalog_enricher.services.extraction.part_number import (
    PartNumberDecoder,
    decode_generic,
    decode_part_number,
)


@pytest.fixture
def decoder():
    return PartNumberDecoder()


class TestSupplierPatterns:
    """Test supplier-specific encodings."""

    def test_seco_solid_drill(self, decoder, make_record):
        record = make_record("SD1103-1000-035-10R1", "SOLID DRILL", "SECO")
        result = decoder.decode(record)

        assert result.success is True
        assert result.tool_diameter == "10.0 mm"
        assert result.overall_length == "35 mm"
        assert result.shank_bore_diameter == "10 mm"
        assert result.corner_radius == NA
        assert result.edge_count == NA

    def test_seco_endmill(self, decoder, make_record):
        record = make_record("JS534060D1B.0Z4-NXT", "Solid Endmill", "SECO")
        result = decoder.decode(record)

        assert result.tool_diameter == "6.0 mm"
        assert result.edge_count == "4"
        assert result.corner_radius == "1 mm"

    def test_kennametal_endmill(self, decoder, make_record):
        record = make_record("H1TE4RA0400N006HBR025M", "Endmill", "KENNAMETAL")
        result = decoder.decode(record)

        assert result.tool_diameter == "4.0 mm"
        assert result.corner_radius == "0.25 mm"
        assert result.shank_bore_diameter == "6 mm"

    def test_sandvik_drill(self, decoder, make_record):
        record = make_record("462.1-0803-024A1", "Drill", "Sandvik Coromant")
        result = decoder.decode(record)

        assert result.tool_diameter == "8.03 mm"
        assert result.overall_length == "24 mm"

    def test_sandvik_endmill(self, decoder, make_record):
        record = make_record("2P160-1K100-0600-WA", "Endmill", "SANDVIK")
        result = decoder.decode(record)

        assert result.tool_diameter == "6.0 mm"
        assert result.overall_length == NA

    def test_walter_endmill(self, decoder, make_record):
        record = make_record("H3094718-6-100", "Endmill", "WALTER")
        result = decoder.decode(record)

        assert result.tool_diameter == "6 mm"
        assert result.overall_length == "100 mm"
        assert result.edge_count == NA

    def test_walter_drill_uses_length_twice(self, decoder, make_record):
        record = make_record("DC170-05-03", "Drill", "WALTER")
        result = decoder.decode(record)

        assert result.tool_diameter == "5 mm"
        assert result.cutting_length == "3 mm"
        assert result.overall_length == "3 mm"

    def test_unmatched_pattern_is_still_success(self, decoder, make_record):
        record = make_record("KCD 12", "Drill", "KENNAMETAL")
        result = decoder.decode(record)

        assert result.success is True
        assert not result.has_any_value()


class TestGenericDecoder:
    """Test the numeric heuristic for unknown suppliers."""

    def test_ranges(self):
        slots = {}
        decode_generic("ACME 12 x 75 R0.5 endmill", slots)

        assert slots == {
            "tool_diameter": "12.0 mm",
            "overall_length": "75 mm",
            "corner_radius": "0.5 mm",
        }

    def test_number_used_once(self):
        slots = {}
        decode_generic("CUTTER 30", slots)

        assert slots == {"tool_diameter": "30.0 mm"}

    def test_unknown_supplier_uses_generic(self, make_record):
        record = make_record("ACME 8 x 60", "Endmill", "Acme Tools")
        result = decode_part_number(record)

        assert record.supplier is SupplierId.UNRECOGNIZED
        assert result.tool_diameter == "8.0 mm"
        assert result.overall_length == "60 mm"


class TestFamilyInference:
    """Test lenient family detection for labels outside the vocabulary."""

    def test_supported_type(self, make_record):
        assert PartNumberDecoder.family_for(make_record(type_of_tool="Drill")) is ToolFamily.DRILLING

    def test_unsupported_drill_label(self, make_record):
        record = make_record(type_of_tool="Indexable drill body")
        assert PartNumberDecoder.family_for(record) is ToolFamily.DRILLING

    def test_unsupported_defaults_to_milling(self, make_record):
        record = make_record(type_of_tool="Facemill")
        assert PartNumberDecoder.family_for(record) is ToolFamily.MILLING

    def test_custom_decoder_table(self, make_record):
        def always_ten(desc, slots):
            slots["tool_diameter"] = "10 mm"

        decoder = PartNumberDecoder({(SupplierId.SECO, ToolFamily.MILLING): always_ten})
        result = decoder.decode(make_record("anything", "Endmill", "SECO"))

        assert result.tool_diameter == "10 mm"
