"""
Criterion registry.

Maps the type names used in configuration files to an options model and a
factory. Built-in criteria are registered explicitly by
register_default_criteria(); callers can register their own at startup.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type, Union

import structlog
from pydantic import ValidationError

from dwca_validator.config import Settings
from dwca_validator.criteria.base import DatasetCriterion, RecordCriterion
from dwca_validator.criteria.completeness import CompletenessCriterion, CompletenessCriterionConfiguration
from dwca_validator.criteria.numeric_range import NumericRangeCriterion, NumericRangeCriterionConfiguration
from dwca_validator.criteria.record_count import RecordCountCriterion
from dwca_validator.criteria.transformations import BooleanTransformation, NotBlankTransformation
from dwca_validator.criteria.uniqueness import UniquenessCriterion
from dwca_validator.exceptions import CriterionConfigurationError
from dwca_validator.result.types import EvaluationContext
from dwca_validator.schemas import (
    CompletenessOptions, CriterionOptions, NumericRangeOptions, RecordCountOptions, UniquenessOptions
)

logger = structlog.get_logger(__name__)

Criterion = Union[RecordCriterion, DatasetCriterion]
CriterionFactory = Callable[[Any, EvaluationContext, Settings], Criterion]


class CriterionKind(str, Enum):
    RECORD = "record"
    DATASET = "dataset"


@dataclass(frozen=True)
class CriterionRegistration:
    type_name: str
    kind: CriterionKind
    options_model: Type[CriterionOptions]
    factory: CriterionFactory


class CriterionRegistry:
    """Type name -> (options model, factory)"""

    def __init__(self):
        self._registrations: Dict[str, CriterionRegistration] = {}

    def register(
        self,
        type_name: str,
        kind: CriterionKind,
        options_model: Type[CriterionOptions],
        factory: CriterionFactory,
    ) -> None:
        if type_name in self._registrations:
            raise CriterionConfigurationError(f"Criterion type '{type_name}' is already registered")
        self._registrations[type_name] = CriterionRegistration(type_name, kind, options_model, factory)
        logger.debug("Registered criterion type", type_name=type_name, kind=kind.value)

    def get(self, type_name: str, kind: Optional[CriterionKind] = None) -> CriterionRegistration:
        registration = self._registrations.get(type_name)
        if registration is None:
            raise CriterionConfigurationError(
                f"Unknown criterion type '{type_name}'. Known types: {', '.join(self.type_names)}"
            )
        if kind is not None and registration.kind != kind:
            raise CriterionConfigurationError(
                f"Criterion type '{type_name}' is a {registration.kind.value} criterion, not {kind.value}"
            )
        return registration

    def parse_options(self, registration: CriterionRegistration, options: Dict[str, Any]) -> CriterionOptions:
        try:
            return registration.options_model(**options)
        except ValidationError as e:
            raise CriterionConfigurationError(
                f"Invalid options for criterion '{registration.type_name}': {e}",
                criterion=registration.type_name,
            ) from e

    @property
    def type_names(self) -> List[str]:
        return sorted(self._registrations)

    def __contains__(self, type_name: str) -> bool:
        return type_name in self._registrations


def _build_completeness(options: CompletenessOptions, context: EvaluationContext, settings: Settings):
    transformations = [NotBlankTransformation(f) for f in options.fields]
    transformations += [BooleanTransformation(f) for f in options.boolean_fields]
    return CompletenessCriterion(CompletenessCriterionConfiguration(
        value_transformations=transformations,
        row_type_restriction=options.row_type_restriction,
        severity=options.severity,
        key=options.key or "completeness",
    ))


def _build_numeric_range(options: NumericRangeOptions, context: EvaluationContext, settings: Settings):
    return NumericRangeCriterion(NumericRangeCriterionConfiguration(
        first_field=options.latitude_field,
        second_field=options.longitude_field,
        first_bounds=options.latitude_bounds,
        second_bounds=options.longitude_bounds,
        sentinel=options.sentinel,
        row_type_restriction=options.row_type_restriction,
        key=options.key or "numeric_range",
    ))


def _build_uniqueness(options: UniquenessOptions, context: EvaluationContext, settings: Settings):
    return UniquenessCriterion(context, field=options.field, key=options.key or "uniqueness", settings=settings)


def _build_record_count(options: RecordCountOptions, context: EvaluationContext, settings: Settings):
    return RecordCountCriterion(options.row_type_restriction, key=options.key or "record_count")


def register_default_criteria(registry: CriterionRegistry) -> CriterionRegistry:
    registry.register("completeness", CriterionKind.RECORD, CompletenessOptions, _build_completeness)
    registry.register("numeric_range", CriterionKind.RECORD, NumericRangeOptions, _build_numeric_range)
    registry.register("uniqueness", CriterionKind.RECORD, UniquenessOptions, _build_uniqueness)
    registry.register("record_count", CriterionKind.DATASET, RecordCountOptions, _build_record_count)
    return registry


def default_registry() -> CriterionRegistry:
    return register_default_criteria(CriterionRegistry())
