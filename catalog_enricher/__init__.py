"""Tool catalog enrichment.

Fills missing tool dimensions (diameter, lengths, corner radius, edge count,
shank) in a spreadsheet catalog by resolving each record against its
supplier's public website.
"""

__version__ = "0.1.0"
