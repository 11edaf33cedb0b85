"""
DwC-A Validator

Validation pipeline for Darwin Core archives: record and dataset criteria,
evaluation chains per core/extension stream, and result accumulation.
"""

from .chain import EvaluationChain
from .chain_loader import ChainLoader
from .record import Record
from .result import (
    AggregationResult, EvaluationContext, InMemoryResultAccumulator, JsonLinesResultAccumulator,
    ResultAccumulator, Severity, ValidationResult, ValidationResultElement, ValidationType
)
from .runner import RunSummary, ValidationRun

__version__ = "0.1.0"

__all__ = [
    "EvaluationChain",
    "ChainLoader",
    "Record",
    "AggregationResult",
    "EvaluationContext",
    "InMemoryResultAccumulator",
    "JsonLinesResultAccumulator",
    "ResultAccumulator",
    "Severity",
    "ValidationResult",
    "ValidationResultElement",
    "ValidationType",
    "RunSummary",
    "ValidationRun",
]
