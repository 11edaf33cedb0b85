"""
Result accumulators.

An accumulator is the single object shared by every evaluation chain of a run.
Implementations serialize internally so one instance can be handed to several
worker threads once constructed.
"""

import json
import threading
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import List, Union

import structlog

from dwca_validator.exceptions import ResultAccumulationError
from dwca_validator.result.types import AggregationResult, Severity, ValidationResult

logger = structlog.get_logger(__name__)

AnyResult = Union[ValidationResult, AggregationResult]


class ResultKind(Enum):
    VALIDATION = "validation"
    AGGREGATION = "aggregation"


def _kind_of(result: AnyResult) -> ResultKind:
    if isinstance(result, ValidationResult):
        return ResultKind.VALIDATION
    if isinstance(result, AggregationResult):
        return ResultKind.AGGREGATION
    raise ResultAccumulationError(
        f"Unsupported result type: {type(result).__name__}", rejected=[result]
    )


def accumulate_or_raise(accumulator: "ResultAccumulator", result: AnyResult) -> None:
    """Accumulate result, turning a refusal into ResultAccumulationError"""
    if not accumulator.accumulate(result):
        raise ResultAccumulationError(
            "Accumulator refused result (closed?)", rejected=[result]
        )


class ResultAccumulator(ABC):
    """
    Base class for result sinks.

    accumulate() returns False when the sink refuses the item (closed
    accumulator) and raises ResultAccumulationError on unrecoverable storage
    failures. Counts only grow until close().
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._closed = False
        self._counts = {ResultKind.VALIDATION: 0, ResultKind.AGGREGATION: 0}
        self._severity_counts = {severity: 0 for severity in Severity}

    def accumulate(self, result: AnyResult) -> bool:
        kind = _kind_of(result)
        with self._lock:
            if self._closed:
                logger.warning("Result rejected by closed accumulator", kind=kind.value)
                return False
            self._store(kind, result)
            self._counts[kind] += 1
            if kind == ResultKind.VALIDATION:
                self._severity_counts[result.max_severity] += 1
        return True

    def count(self, kind: ResultKind) -> int:
        with self._lock:
            return self._counts[kind]

    def get_validation_result_count(self) -> int:
        return self.count(ResultKind.VALIDATION)

    def get_aggregation_result_count(self) -> int:
        return self.count(ResultKind.AGGREGATION)

    def count_by_severity(self, severity: Severity) -> int:
        """Validation results whose most severe element is severity (OK = passed)"""
        with self._lock:
            return self._severity_counts[severity]

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._release()
        logger.info(
            "Accumulator closed",
            validation_results=self._counts[ResultKind.VALIDATION],
            aggregation_results=self._counts[ResultKind.AGGREGATION],
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @abstractmethod
    def _store(self, kind: ResultKind, result: AnyResult) -> None:
        """Persist one result; called with the lock held"""
        pass

    def _release(self) -> None:
        """Release underlying storage; called with the lock held"""
        pass


class InMemoryResultAccumulator(ResultAccumulator):
    """Keeps every result in memory, mainly for tests and small archives"""

    def __init__(self):
        super().__init__()
        self._validation_results: List[ValidationResult] = []
        self._aggregation_results: List[AggregationResult] = []

    def _store(self, kind: ResultKind, result: AnyResult) -> None:
        if kind == ResultKind.VALIDATION:
            self._validation_results.append(result)
        else:
            self._aggregation_results.append(result)

    @property
    def validation_results(self) -> List[ValidationResult]:
        with self._lock:
            return list(self._validation_results)

    @property
    def aggregation_results(self) -> List[AggregationResult]:
        with self._lock:
            return list(self._aggregation_results)


class JsonLinesResultAccumulator(ResultAccumulator):
    """
    Appends one JSON object per result to a file.

    Each line carries a "kind" field ("validation" or "aggregation") followed
    by the result's own fields. The file is opened on construction and closed
    by close().
    """

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = open(self.path, "w", encoding="utf-8")
        except OSError as e:
            raise ResultAccumulationError(f"Cannot open result file {self.path}: {e}") from e

    def _store(self, kind: ResultKind, result: AnyResult) -> None:
        line = json.dumps({"kind": kind.value, **result.to_dict()}, default=str)
        try:
            self._fh.write(line + "\n")
        except (OSError, ValueError) as e:  # ValueError: write to a closed file
            raise ResultAccumulationError(
                f"Cannot write result to {self.path}: {e}", rejected=[result]
            ) from e

    def _release(self) -> None:
        try:
            self._fh.close()
        except OSError as e:
            logger.error("Failed to close result file", path=str(self.path), error=str(e))
