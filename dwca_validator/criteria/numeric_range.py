"""
Numeric range criterion for a pair of fields.

The defaults check decimal coordinates: latitude within [-90, 90], longitude
within [-180, 180], and flag 0/0 as a suspicious default. Records whose
values are in range produce no result at all.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from dwca_validator.criteria.base import RecordCriterion, row_type_matches
from dwca_validator.messages import format_message
from dwca_validator.record import Record
from dwca_validator.result.types import (
    EvaluationContext, Severity, ValidationResult, ValidationResultElement, ValidationType
)

Bounds = Tuple[float, float]


@dataclass
class NumericRangeCriterionConfiguration:
    first_field: str = "decimalLatitude"
    second_field: str = "decimalLongitude"
    first_bounds: Bounds = (-90.0, 90.0)
    second_bounds: Bounds = (-180.0, 180.0)
    sentinel: Optional[Tuple[float, float]] = (0.0, 0.0)
    row_type_restriction: Optional[str] = None
    key: str = "numeric_range"


def _parse_number(value: str) -> Optional[float]:
    try:
        number = float(value.strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


class NumericRangeCriterion(RecordCriterion):

    def __init__(self, configuration: Optional[NumericRangeCriterionConfiguration] = None):
        configuration = configuration or NumericRangeCriterionConfiguration()
        for low, high in (configuration.first_bounds, configuration.second_bounds):
            if low > high:
                raise ValueError(f"Invalid bounds: {low} > {high}")
        self.key = configuration.key
        self.fields = (
            (configuration.first_field, configuration.first_bounds),
            (configuration.second_field, configuration.second_bounds),
        )
        self.sentinel = configuration.sentinel
        self.row_type_restriction = configuration.row_type_restriction

    def _element(self, category: ValidationType, severity: Severity, message: str) -> ValidationResultElement:
        return ValidationResultElement(self.key, category, severity, message)

    def validate(self, record: Record, context: EvaluationContext) -> Optional[ValidationResult]:
        if not row_type_matches(self.row_type_restriction, record):
            return None

        elements: List[ValidationResultElement] = []
        parsed: List[Optional[float]] = []

        for field_name, (low, high) in self.fields:
            raw = record.value(field_name)
            if raw is None or not raw.strip():
                parsed.append(None)
                continue

            number = _parse_number(raw)
            parsed.append(number)
            if number is None:
                elements.append(self._element(
                    ValidationType.RECORD_CONTENT_VALUE, Severity.ERROR,
                    format_message("criterion.numeric_range.unparseable", field_name, raw),
                ))
            elif not low <= number <= high:
                elements.append(self._element(
                    ValidationType.RECORD_CONTENT_BOUNDS, Severity.ERROR,
                    format_message("criterion.numeric_range.out_of_bounds", field_name, raw, low, high),
                ))

        if self.sentinel is not None and tuple(parsed) == tuple(self.sentinel):
            first_raw = record.value(self.fields[0][0])
            second_raw = record.value(self.fields[1][0])
            elements.append(self._element(
                ValidationType.RECORD_CONTENT_VALUE, Severity.WARNING,
                format_message("criterion.numeric_range.suspicious_default", first_raw, second_raw),
            ))

        if not elements:
            return None
        return ValidationResult(record.id, context, record.row_type, tuple(elements))
