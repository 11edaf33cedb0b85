"""Result model and accumulators"""

from .types import (
    AggregationResult, ContextKind, EvaluationContext, Severity,
    ValidationResult, ValidationResultElement, ValidationType
)
from .accumulator import (
    InMemoryResultAccumulator, JsonLinesResultAccumulator, ResultAccumulator, ResultKind
)

__all__ = [
    "AggregationResult",
    "ContextKind",
    "EvaluationContext",
    "Severity",
    "ValidationResult",
    "ValidationResultElement",
    "ValidationType",
    "InMemoryResultAccumulator",
    "JsonLinesResultAccumulator",
    "ResultAccumulator",
    "ResultKind",
]
