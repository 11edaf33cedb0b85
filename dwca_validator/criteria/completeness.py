"""Completeness criterion: required fields must be present and truthy"""

from dataclasses import dataclass, field
from typing import List, Optional

from dwca_validator.criteria.base import RecordCriterion, row_type_matches
from dwca_validator.criteria.transformations import ValueTransformation
from dwca_validator.messages import format_message
from dwca_validator.record import Record
from dwca_validator.result.types import (
    EvaluationContext, Severity, ValidationResult, ValidationResultElement, ValidationType
)


@dataclass
class CompletenessCriterionConfiguration:
    value_transformations: List[ValueTransformation[bool]] = field(default_factory=list)
    row_type_restriction: Optional[str] = None
    severity: Severity = Severity.ERROR
    key: str = "completeness"


class CompletenessCriterion(RecordCriterion):
    """
    Checks that every configured transformation yields True.

    Passing records are still reported, as a result without elements.
    """

    def __init__(self, configuration: CompletenessCriterionConfiguration):
        self.key = configuration.key
        self.value_transformations = list(configuration.value_transformations)
        self.row_type_restriction = configuration.row_type_restriction
        self.severity = configuration.severity

    def validate(self, record: Record, context: EvaluationContext) -> Optional[ValidationResult]:
        if not row_type_matches(self.row_type_restriction, record):
            return None

        elements = []
        for transformation in self.value_transformations:
            outcome = transformation.transform(record)
            if outcome.is_not_transformed or outcome.data is False:
                elements.append(ValidationResultElement(
                    criterion_key=self.key,
                    category=ValidationType.RECORD_CONTENT_VALUE,
                    severity=self.severity,
                    message=format_message("criterion.completeness.incomplete", outcome.field),
                ))

        return ValidationResult(record.id, context, record.row_type, tuple(elements))
