"""Kennametal strategy: static search, first product link wins."""
from catalog_enricher.models.catalog import ToolFamily
from catalog_enricher.services.suppliers.base import SupplierStrategy

_SHANK = ("Adapter / Shank / Bore Diameter", "Adapter", "Shank", "Bore Diameter", "D", "d1")


class KennametalStrategy(SupplierStrategy):
    identity = "KENNAMETAL"
    base_url = "https://www.kennametal.com/us/en/home.html"
    search_url = "https://www.kennametal.com/us/en/search.html?q="
    product_link_markers = ("/product/", "/us/en/")
    first_link_only = True

    aliases = {
        ToolFamily.MILLING: {
            "tool_diameter": ("D1", "D", "diameter"),
            "cutting_length": ("AP1MAX", "APmax", "cutting length"),
            "corner_radius": ("Re", "corner", "radius"),
            "edge_count": ("Z", "flute", "teeth"),
            "overall_length": ("l1", "length", "overall"),
            "shank_bore_diameter": _SHANK,
        },
        ToolFamily.DRILLING: {
            "tool_diameter": ("D1", "D", "diameter"),
            "cutting_length": ("L4", "length", "flute"),
            "overall_length": ("L", "l1", "length", "overall"),
            "shank_bore_diameter": _SHANK,
        },
    }
