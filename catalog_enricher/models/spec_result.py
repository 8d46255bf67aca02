"""Pydantic model for the outcome of one resolution attempt."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from catalog_enricher.models.catalog import NA, SLOT_FIELDS


class SpecResult(BaseModel):
    """Six generic attribute slots resolved for one record.

    Slot meaning depends on supplier and tool family; see SLOT_FIELDS.
    Every slot holds either a normalized value or the NA sentinel.
    Instances are immutable; use ``model_copy(update=...)`` to derive.
    """

    tool_diameter: str = NA
    cutting_length: str = NA
    corner_radius: str = NA
    edge_count: str = NA
    overall_length: str = NA
    shank_bore_diameter: str = NA

    success: bool = False
    error_message: Optional[str] = Field(
        default=None,
        description="Why the resolution failed, when it did"
    )

    model_config = ConfigDict(frozen=True)

    @classmethod
    def failed(cls, message: str) -> "SpecResult":
        """All slots NA, success unset, carrying the reason."""
        return cls(success=False, error_message=message)

    @classmethod
    def all_na(cls) -> "SpecResult":
        """Terminal result for records whose type is out of scope."""
        return cls(success=True)

    def slots(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in SLOT_FIELDS}

    def has_value(self, slot: str) -> bool:
        value = getattr(self, slot)
        return bool(value) and value.strip() != "" and value != NA

    def has_any_value(self) -> bool:
        """True when at least one slot resolved to something other than NA."""
        return any(self.has_value(name) for name in SLOT_FIELDS)
