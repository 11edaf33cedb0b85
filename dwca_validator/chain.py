"""
Evaluation chain.

One chain drives the record stream of one context through an ordered list of
record criteria, then runs finalization (stream criteria first, dataset
criteria second). All chains of a run share one accumulator.
"""

from typing import List, Optional, Sequence

import structlog

from dwca_validator.criteria.base import DatasetCriterion, RecordCriterion, StreamCriterion
from dwca_validator.exceptions import ChainStateError, CriterionConfigurationError
from dwca_validator.record import Record
from dwca_validator.result.accumulator import ResultAccumulator, accumulate_or_raise
from dwca_validator.result.types import EvaluationContext

logger = structlog.get_logger(__name__)


class EvaluationChain:
    """
    Ordered criteria for one evaluation context.

    process() may be called any number of times, end_of_stream() exactly once
    afterwards. A criterion failing on a record is logged and skipped for that
    record only; accumulation failures always reach the caller.
    """

    def __init__(
        self,
        context: EvaluationContext,
        record_criteria: Sequence[RecordCriterion],
        dataset_criteria: Sequence[DatasetCriterion],
        accumulator: ResultAccumulator,
    ):
        if context is None:
            raise CriterionConfigurationError("An evaluation context must be set")
        if accumulator is None:
            raise CriterionConfigurationError("A result accumulator must be set")

        self.context = context
        self.record_criteria: List[RecordCriterion] = list(record_criteria or [])
        self.dataset_criteria: List[DatasetCriterion] = list(dataset_criteria or [])
        self.accumulator = accumulator
        self._check_unique_keys()

        self._ended = False
        self._records_processed = 0
        self._criterion_failures = 0
        self.degraded_criteria: List[str] = []
        self.log = logger.bind(context=str(context))

    def _check_unique_keys(self) -> None:
        seen = set()
        for criterion in [*self.record_criteria, *self.dataset_criteria]:
            if criterion.key in seen:
                raise CriterionConfigurationError(
                    f"Duplicate criterion key '{criterion.key}' in chain for {self.context}",
                    criterion=criterion.key,
                )
            seen.add(criterion.key)

    @property
    def keys(self) -> List[str]:
        return [c.key for c in [*self.record_criteria, *self.dataset_criteria]]

    @property
    def records_processed(self) -> int:
        return self._records_processed

    @property
    def criterion_failures(self) -> int:
        return self._criterion_failures

    @property
    def degraded(self) -> bool:
        return bool(self.degraded_criteria)

    def process(self, record: Record) -> None:
        if self._ended:
            raise ChainStateError(f"Chain for {self.context} already reached end of stream")

        self._records_processed += 1
        for criterion in self.record_criteria:
            try:
                result = criterion.validate(record, self.context)
            except Exception as e:
                self._criterion_failures += 1
                self.log.error(
                    "Criterion failed on record",
                    criterion=criterion.key,
                    record_id=record.id,
                    error=str(e),
                    exc_info=True,
                )
                continue
            if result is not None:
                accumulate_or_raise(self.accumulator, result)

        for criterion in self.dataset_criteria:
            try:
                criterion.observe(record, self.context)
            except Exception as e:
                self._criterion_failures += 1
                self.log.error(
                    "Dataset criterion failed to observe record",
                    criterion=criterion.key,
                    record_id=record.id,
                    error=str(e),
                    exc_info=True,
                )

    def end_of_stream(self, context: Optional[EvaluationContext] = None) -> None:
        context = context or self.context
        if context != self.context:
            raise ChainStateError(f"Chain for {self.context} cannot end stream of {context}")
        if self._ended:
            raise ChainStateError(f"end_of_stream already called for {self.context}")
        self._ended = True

        try:
            for criterion in self.record_criteria:
                if isinstance(criterion, StreamCriterion):
                    criterion.finalize(self.accumulator)
                    if criterion.degraded:
                        self.degraded_criteria.append(criterion.key)

            for criterion in self.dataset_criteria:
                aggregation = criterion.evaluate(self.context)
                if aggregation is not None:
                    accumulate_or_raise(self.accumulator, aggregation)
        finally:
            self.close()

        self.log.info(
            "Context evaluation complete",
            records=self._records_processed,
            criterion_failures=self._criterion_failures,
            degraded_criteria=self.degraded_criteria,
        )

    def close(self) -> None:
        """Release criterion resources (temp files); safe to call at any time"""
        for criterion in self.record_criteria:
            if isinstance(criterion, StreamCriterion):
                criterion.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
