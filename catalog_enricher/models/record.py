"""Pydantic model for one catalog row."""
from typing import Optional

from pydantic import BaseModel, Field

from catalog_enricher.models.catalog import NA, SLOT_FIELDS, SupplierId, ToolFamily, ToolType
from catalog_enricher.models.spec_result import SpecResult
from catalog_enricher.services.classification import classifier


def is_absent(value: Optional[str]) -> bool:
    """A slot is absent when empty, blank or still holding the NA sentinel."""
    return value is None or value.strip() == "" or value.strip() == NA


class ToolRecord(BaseModel):
    """A single tool row imported from the catalog spreadsheet.

    The six attribute fields are optional; a pre-filled value is never
    overwritten by resolution (see ``merge``). Supplier and tool type are
    derived from the free-text columns on every access.
    """

    row_index: int = Field(default=0, ge=0, description="Source spreadsheet row")
    no: int = Field(default=0, description="Sequence number from column 1")
    tool_description: str = Field(default="", description="Part number / description")
    type_of_tool: str = ""
    shank_bore_diameter: Optional[str] = None
    tool_diameter: Optional[str] = None
    corner_radius: Optional[str] = None
    cutting_length: Optional[str] = None
    overall_length: Optional[str] = None
    edge_count: Optional[str] = None
    procurement_channel: str = ""

    model_config = {
        "json_schema_extra": {
            "example": {
                "row_index": 2,
                "no": 1,
                "tool_description": "SD1103-1000-035-10R1",
                "type_of_tool": "Solid Drill",
                "procurement_channel": "SECO",
            }
        }
    }

    @property
    def supplier(self) -> SupplierId:
        return classifier.normalize_supplier(self.procurement_channel)

    @property
    def tool_type(self) -> ToolType:
        return classifier.normalize_tool_type(self.type_of_tool)

    @property
    def tool_family(self) -> Optional[ToolFamily]:
        return self.tool_type.family

    @property
    def is_supported_type(self) -> bool:
        return self.tool_type.is_supported

    def missing_slots(self) -> list[str]:
        return [name for name in SLOT_FIELDS if is_absent(getattr(self, name))]

    def merge(self, result: SpecResult) -> list[str]:
        """Fill absent slots from a result; never overwrite a filled value.

        Returns:
            Names of the slots written
        """
        written = []
        for name, value in result.slots().items():
            current = getattr(self, name)
            if not is_absent(current):
                continue
            # Keep a pre-existing sentinel rather than replacing it with another one
            if current is not None and current.strip() == NA and value == NA:
                continue
            setattr(self, name, value)
            written.append(name)
        return written
