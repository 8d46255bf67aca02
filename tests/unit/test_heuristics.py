"""Unit tests for the layered extraction heuristics and text scanners."""
import pytest

from catalog_enricher.services.extraction.heuristics import (
    AttributeQuery,
    Document,
    extract_attribute,
    extract_spec,
    find_code_value,
    find_tab_row_value,
    from_count_window,
    from_definition_lists,
    from_inline_text,
    from_label_value_elements,
    from_proximity_window,
    from_structured_rows,
    label_matches,
    section_after,
)


@pytest.fixture
def seco_product(load_fixture):
    return Document.from_html(load_fixture("seco_product.html"))


@pytest.fixture
def mixed_layouts(load_fixture):
    return Document.from_html(load_fixture("mixed_layouts.html"))


class TestDocument:
    """Test markup preparation."""

    def test_scripts_and_styles_are_removed(self, seco_product):
        assert "dataLayer" not in seco_product.text
        assert "padding" not in seco_product.text

    def test_table_rows_skip_single_cell_rows(self):
        doc = Document.from_html(
            "<table><tr><td>only</td></tr><tr><td>DC</td><td>10 mm</td></tr></table>"
        )
        assert doc.table_rows() == [["DC", "10 mm"]]

    def test_links(self, load_fixture):
        doc = Document.from_html(load_fixture("seco_search.html"))
        assert ("/article/222", "JS534060D1B.0Z4-NXT") in doc.links()


class TestLabelMatching:
    """Test alias matching rules."""

    def test_short_alias_requires_whole_token(self):
        assert not label_matches("Generic representation", "RE")
        assert label_matches("Corner radius (RE)", "RE")
        assert label_matches("re", "RE")

    def test_short_alias_does_not_match_longer_code(self):
        assert not label_matches("DCONMS", "DC")

    def test_long_alias_matches_substring(self):
        assert label_matches("Overall length", "length")
        assert label_matches("SHANK DIAMETER (h6)", "shank")

    def test_empty(self):
        assert not label_matches("", "DC")
        assert not label_matches("DC", " ")


class TestAttributeQuery:
    """Test query kind inference."""

    def test_count_like_inferred_from_aliases(self):
        assert AttributeQuery.for_aliases(["PCEDC", "Z", "flute"]).count_like
        assert not AttributeQuery.for_aliases(["DC", "diameter"]).count_like

    def test_shank_like_inferred_from_aliases(self):
        assert AttributeQuery.for_aliases(["DMM", "shank", "bore"]).shank_like
        assert not AttributeQuery.for_aliases(["OAL", "length"]).shank_like

    def test_explicit_kind_overrides_inference(self):
        assert AttributeQuery.for_aliases(["teeth"], count_like=False).count_like is False


class TestStructuredRows:
    """Test heuristic (a) on a three-column spec table."""

    @pytest.mark.parametrize(
        "aliases,expected",
        [
            (("DC", "diameter"), "6.00 mm"),
            (("APMX", "APmax", "cutting length"), "13.00 mm"),
            (("RE", "corner", "radius"), "1.00 mm"),
            (("OAL", "length", "overall"), "57.00 mm"),
            (("DMM", "shank", "bore"), "6.00 mm"),
        ],
    )
    def test_measurements(self, seco_product, aliases, expected):
        query = AttributeQuery.for_aliases(aliases)
        assert from_structured_rows(seco_product, query) == expected

    def test_bare_count(self, seco_product):
        query = AttributeQuery.for_aliases(("PCEDC", "Z", "flute", "teeth"))
        assert from_structured_rows(seco_product, query) == "4"

    def test_inch_cell_converted(self):
        doc = Document.from_html(
            "<table><tr><td>Cutting diameter (DC)</td><td>0.5 in</td></tr></table>"
        )
        assert extract_spec(doc, ["DC", "diameter"]) == "12.70 mm"

    def test_inch_cell_rejected_when_metric_only(self):
        doc = Document.from_html(
            "<table><tr><td>Cutting diameter (DC)</td><td>0.5 in</td></tr></table>"
        )
        assert extract_spec(doc, ["DC", "diameter"], metric_only=True) is None


class TestDocumentHeuristics:
    """Test heuristics (c) to (g) on a page mixing layouts."""

    def test_definition_list(self, mixed_layouts):
        query = AttributeQuery.for_aliases(("OAL", "length", "overall"))
        assert from_definition_lists(mixed_layouts, query) == "75 mm"

    def test_label_value_elements(self, mixed_layouts):
        query = AttributeQuery.for_aliases(("DMM", "shank", "bore"))
        assert from_label_value_elements(mixed_layouts, query) == "8 mm"

    def test_inline_count(self, mixed_layouts):
        query = AttributeQuery.for_aliases(("PCEDC", "Z", "flute", "teeth"))
        assert from_inline_text(mixed_layouts, query) == "3"

    def test_inline_defaults_to_millimetres(self):
        doc = Document.from_html("<p>Diameter: 12</p>")
        query = AttributeQuery.for_aliases(("diameter",))
        assert from_inline_text(doc, query) == "12 mm"

    def test_inline_metric_only_rejects_inch_value(self):
        doc = Document.from_html("<p>DC 0.5 in</p>")
        query = AttributeQuery.for_aliases(("DC",), metric_only=True)
        assert from_inline_text(doc, query) is None

    def test_proximity_window(self, mixed_layouts):
        query = AttributeQuery.for_aliases(("RE", "corner", "radius"))
        assert from_proximity_window(mixed_layouts, query) == "0.2 mm"

    def test_proximity_window_skips_counts(self, mixed_layouts):
        query = AttributeQuery.for_aliases(("Z",), count_like=True)
        assert from_proximity_window(mixed_layouts, query) is None

    def test_count_window_range(self):
        doc = Document.from_html("<div>Teeth</div><div>6</div>")
        query = AttributeQuery.for_aliases(("teeth",))
        assert from_count_window(doc, query) == "6"

        doc = Document.from_html("<div>Teeth</div><div>48</div>")
        assert from_count_window(doc, query) is None


class TestPipeline:
    """Test pipeline ordering and fallthrough."""

    def test_first_heuristic_wins(self, mixed_layouts):
        assert extract_spec(mixed_layouts, ["OAL", "length", "overall"]) == "75 mm"
        assert extract_spec(mixed_layouts, ["RE", "corner", "radius"]) == "0.2 mm"

    def test_relaxed_shank_pattern(self):
        doc = Document.from_html("<p>Shank diameter h6 tolerance 6.00 mm</p>")
        assert extract_spec(doc, ["DMM", "shank", "bore"]) == "6.00 mm"

    def test_miss_returns_none(self):
        doc = Document.from_html("<p>No technical data available.</p>")
        assert extract_spec(doc, ["DC", "diameter"]) is None

    def test_custom_heuristic_list(self, seco_product):
        query = AttributeQuery.for_aliases(("DC",))
        assert extract_attribute(seco_product, query, heuristics=()) is None


class TestRenderedTextScanners:
    """Test scanners used on rendered page text."""

    def test_code_value_with_unit(self, load_fixture):
        text = load_fixture("sandvik_rendered.txt")
        assert find_code_value(text, "Corner radius(RE)") == "0.5 mm"
        assert find_code_value(text, "Cutting diameter(DC)", metric_only=True) == "10 mm"

    def test_code_value_count(self, load_fixture):
        text = load_fixture("sandvik_rendered.txt")
        value = find_code_value(
            text, "Peripheral effective cutting edge count(ZEFP)", count_like=True
        )
        assert value == "4"

    def test_code_value_metric_only_skips_inches(self):
        assert find_code_value("Cutting diameter(DC)\n0.5 in", "Cutting diameter(DC)", metric_only=True) is None
        assert find_code_value("Cutting diameter(DC)\n0.5 in", "Cutting diameter(DC)") == "12.70 mm"

    def test_code_value_missing_label(self):
        assert find_code_value("nothing here", "OAL") is None

    def test_section_after(self):
        text = "Menu RE 99 mm\nProduct data\nCutting diameter(DC)\n10 mm"
        assert section_after(text, "Product data", required="Cutting diameter").startswith(
            "Product data"
        )
        assert section_after(text, "Product data", required="Weight") == text
        assert section_after(text, "Downloads") == text

    def test_tab_rows(self, load_fixture):
        text = load_fixture("walter_rendered.txt")
        assert find_tab_row_value(text, "Dc") == "10 mm"
        assert find_tab_row_value(text, "R") == "0.5 mm"
        assert find_tab_row_value(text, "l1") == "72 mm"
        assert find_tab_row_value(text, "Z", count_like=True) == "4"

    def test_tab_rows_are_case_sensitive(self, load_fixture):
        text = load_fixture("walter_rendered.txt")
        assert find_tab_row_value(text, "L1") is None
