"""
Typed configuration models for the built-in criteria.

Each entry of a validation chain configuration file is parsed into one of
these models before any criterion is constructed, so unknown options and bad
values are rejected at build time.
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from dwca_validator.result.types import Severity


class CriterionOptions(BaseModel):
    """Options shared by every criterion entry"""
    model_config = ConfigDict(extra="forbid")

    key: Optional[str] = Field(default=None, description="Overrides the default criterion key")
    contexts: Optional[List[str]] = Field(
        default=None,
        description='Contexts the criterion runs in: "core" and/or extension row types; all when omitted',
    )

    def applies_to(self, context) -> bool:
        if self.contexts is None:
            return True
        wanted = {c.strip().lower() for c in self.contexts}
        if context.is_core:
            return "core" in wanted
        return context.row_type.lower() in wanted


class CompletenessOptions(CriterionOptions):
    fields: List[str] = Field(default_factory=list, description="Fields that must be non-blank")
    boolean_fields: List[str] = Field(default_factory=list, description="Flag fields that must be true")
    row_type_restriction: Optional[str] = None
    severity: Severity = Severity.ERROR

    @field_validator("severity", mode="before")
    @classmethod
    def parse_severity(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return Severity[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown severity '{value}'")
        return value

    @model_validator(mode="after")
    def require_fields(self) -> "CompletenessOptions":
        if not self.fields and not self.boolean_fields:
            raise ValueError("completeness requires at least one of fields / boolean_fields")
        return self


class NumericRangeOptions(CriterionOptions):
    latitude_field: str = "decimalLatitude"
    longitude_field: str = "decimalLongitude"
    latitude_bounds: Tuple[float, float] = (-90.0, 90.0)
    longitude_bounds: Tuple[float, float] = (-180.0, 180.0)
    sentinel: Optional[Tuple[float, float]] = (0.0, 0.0)
    row_type_restriction: Optional[str] = None

    @field_validator("latitude_bounds", "longitude_bounds")
    @classmethod
    def ordered_bounds(cls, value: Tuple[float, float]) -> Tuple[float, float]:
        if value[0] > value[1]:
            raise ValueError(f"lower bound {value[0]} exceeds upper bound {value[1]}")
        return value


class UniquenessOptions(CriterionOptions):
    field: Optional[str] = Field(default=None, description="Field to check; the record id when omitted")


class RecordCountOptions(CriterionOptions):
    row_type_restriction: Optional[str] = None


class ChainConfiguration(BaseModel):
    """Top-level layout of a chain configuration document"""
    model_config = ConfigDict(extra="forbid")

    record_criteria: List[Dict[str, Any]] = Field(default_factory=list)
    dataset_criteria: List[Dict[str, Any]] = Field(default_factory=list)
