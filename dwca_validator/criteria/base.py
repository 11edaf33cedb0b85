"""
Criterion contracts.

RecordCriterion evaluates one record at a time, DatasetCriterion produces a
single dataset-wide fact per context, and StreamCriterion is a record
criterion whose findings only exist once the whole stream has been seen.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from dwca_validator.exceptions import CriterionStateError
from dwca_validator.record import Record
from dwca_validator.result.accumulator import ResultAccumulator
from dwca_validator.result.types import AggregationResult, EvaluationContext, ValidationResult


def row_type_matches(restriction: Optional[str], record: Record) -> bool:
    """True when no restriction is set or the record's row type matches it"""
    if restriction is None or not restriction.strip():
        return True
    return restriction.strip().lower() == (record.row_type or "").lower()


class RecordCriterion(ABC):
    """Per-record check"""

    key: str

    @abstractmethod
    def validate(self, record: Record, context: EvaluationContext) -> Optional[ValidationResult]:
        """
        Evaluate one record.

        Returns None when the criterion does not apply to the record (e.g. row
        type restriction), and a ValidationResult otherwise; a result with no
        elements means the record passed.
        """
        pass


class DatasetCriterion(ABC):
    """Per-dataset check, evaluated once per context after its last record"""

    key: str

    def observe(self, record: Record, context: EvaluationContext) -> None:
        """Per-record hook for criteria that keep counters"""
        pass

    @abstractmethod
    def evaluate(self, context: EvaluationContext) -> Optional[AggregationResult]:
        pass


class CriterionState(str, Enum):
    IDLE = "idle"
    OBSERVING = "observing"
    FINALIZING = "finalizing"
    DONE = "done"


class StreamCriterion(RecordCriterion):
    """
    Record criterion with a deferred, whole-stream finalization.

    Lifecycle per instance: IDLE -> OBSERVING (first record) -> FINALIZING
    (end of stream) -> DONE. validate() only observes and never returns a
    result; findings are written to the accumulator by finalize(), which runs
    exactly once. close() releases resources of an instance that will never
    be finalized and is always safe to call.
    """

    def __init__(self):
        self._state = CriterionState.IDLE

    @property
    def state(self) -> CriterionState:
        return self._state

    def validate(self, record: Record, context: EvaluationContext) -> Optional[ValidationResult]:
        if self._state in (CriterionState.FINALIZING, CriterionState.DONE):
            raise CriterionStateError(self.key, self._state.value, "observe a record")
        self._state = CriterionState.OBSERVING
        self._observe(record, context)
        return None

    def finalize(self, accumulator: ResultAccumulator) -> None:
        if self._state in (CriterionState.FINALIZING, CriterionState.DONE):
            raise CriterionStateError(self.key, self._state.value, "finalize")
        self._state = CriterionState.FINALIZING
        try:
            self._finalize(accumulator)
        finally:
            self._state = CriterionState.DONE
            self.close()

    def close(self) -> None:
        pass

    @property
    def degraded(self) -> bool:
        """True when the criterion could not check the whole stream"""
        return False

    @abstractmethod
    def _observe(self, record: Record, context: EvaluationContext) -> None:
        pass

    @abstractmethod
    def _finalize(self, accumulator: ResultAccumulator) -> None:
        pass
