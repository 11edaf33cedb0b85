"""Criterion contracts and built-in criteria"""

from .base import CriterionState, DatasetCriterion, RecordCriterion, StreamCriterion
from .completeness import CompletenessCriterion, CompletenessCriterionConfiguration
from .numeric_range import NumericRangeCriterion, NumericRangeCriterionConfiguration
from .record_count import RecordCountCriterion
from .transformations import (
    BooleanTransformation, NotBlankTransformation, ValueTransformation, ValueTransformationResult
)
from .uniqueness import UniquenessCriterion

__all__ = [
    "CriterionState",
    "DatasetCriterion",
    "RecordCriterion",
    "StreamCriterion",
    "CompletenessCriterion",
    "CompletenessCriterionConfiguration",
    "NumericRangeCriterion",
    "NumericRangeCriterionConfiguration",
    "RecordCountCriterion",
    "BooleanTransformation",
    "NotBlankTransformation",
    "ValueTransformation",
    "ValueTransformationResult",
    "UniquenessCriterion",
]
