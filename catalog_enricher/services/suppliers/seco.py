"""SECO Tools strategy: static search with link ranking."""
from catalog_enricher.models.catalog import ToolFamily
from catalog_enricher.services.suppliers.base import SupplierStrategy


class SecoStrategy(SupplierStrategy):
    identity = "SECO"
    base_url = "https://www.secotools.com"
    search_url = "https://www.secotools.com/search?q="
    product_link_markers = ("/article/", "/product/")

    aliases = {
        ToolFamily.MILLING: {
            "tool_diameter": ("DC", "diameter"),
            "cutting_length": ("APMX", "APmax", "cutting length"),
            "corner_radius": ("RE", "corner", "radius"),
            "edge_count": ("PCEDC", "Z", "flute", "teeth"),
            "overall_length": ("OAL", "length", "overall"),
            "shank_bore_diameter": ("DMM", "shank", "bore"),
        },
        ToolFamily.DRILLING: {
            "tool_diameter": ("DC", "diameter"),
            "cutting_length": ("LU", "length", "flute"),
            "overall_length": ("OAL", "length", "overall"),
            "shank_bore_diameter": ("DCONMS", "shank", "diameter"),
        },
    }
