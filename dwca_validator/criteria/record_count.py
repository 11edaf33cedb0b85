"""Record count dataset criterion"""

from typing import Optional

from dwca_validator.criteria.base import DatasetCriterion, row_type_matches
from dwca_validator.record import Record
from dwca_validator.result.types import AggregationResult, EvaluationContext


class RecordCountCriterion(DatasetCriterion):
    """Counts the records of a context (optionally of one row type only)"""

    def __init__(self, row_type_restriction: Optional[str] = None, key: str = "record_count"):
        self.key = key
        self.row_type_restriction = row_type_restriction
        self._count = 0

    def observe(self, record: Record, context: EvaluationContext) -> None:
        if row_type_matches(self.row_type_restriction, record):
            self._count += 1

    def evaluate(self, context: EvaluationContext) -> Optional[AggregationResult[int]]:
        return AggregationResult(self.key, context, self._count)
