"""
Validation run: one evaluation chain per context, each on its own worker.

Chains are built up front so configuration errors surface before any record
is read. Every context then runs process()/end_of_stream() on a thread of a
ThreadPoolExecutor against the shared accumulator. Temp files are released
even when a worker fails.
"""

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional

import structlog

from dwca_validator.chain import EvaluationChain
from dwca_validator.config import settings
from dwca_validator.record import Record
from dwca_validator.result.accumulator import ResultAccumulator
from dwca_validator.result.types import EvaluationContext

logger = structlog.get_logger(__name__)

ChainFactory = Callable[[EvaluationContext, ResultAccumulator], EvaluationChain]


@dataclass
class ContextOutcome:
    context: EvaluationContext
    records_processed: int = 0
    criterion_failures: int = 0
    degraded_criteria: List[str] = field(default_factory=list)
    error: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def degraded(self) -> bool:
        return bool(self.degraded_criteria) or self.error is not None


@dataclass
class RunSummary:
    validation_results: int
    aggregation_results: int
    outcomes: Dict[EvaluationContext, ContextOutcome]

    @property
    def degraded_contexts(self) -> List[EvaluationContext]:
        return [ctx for ctx, outcome in self.outcomes.items() if outcome.degraded]

    @property
    def records_processed(self) -> int:
        return sum(o.records_processed for o in self.outcomes.values())


class ValidationRun:
    """Drives the record streams of all contexts of one archive"""

    def __init__(
        self,
        chain_factory: ChainFactory,
        accumulator: ResultAccumulator,
        max_workers: Optional[int] = None,
    ):
        self.chain_factory = chain_factory
        self.accumulator = accumulator
        self.max_workers = max_workers or settings.max_workers

    def _build_chains(self, contexts: Iterable[EvaluationContext]) -> Dict[EvaluationContext, EvaluationChain]:
        chains: Dict[EvaluationContext, EvaluationChain] = {}
        try:
            for context in contexts:
                chains[context] = self.chain_factory(context, self.accumulator)
        except Exception:
            for chain in chains.values():
                chain.close()
            raise
        return chains

    @staticmethod
    def _run_context(chain: EvaluationChain, records: Iterable[Record]) -> ContextOutcome:
        outcome = ContextOutcome(context=chain.context)
        started = time.time()
        with chain:
            try:
                for record in records:
                    chain.process(record)
                chain.end_of_stream(chain.context)
            finally:
                outcome.records_processed = chain.records_processed
                outcome.criterion_failures = chain.criterion_failures
                outcome.degraded_criteria = list(chain.degraded_criteria)
                outcome.duration_seconds = time.time() - started
        return outcome

    def run(self, streams: Mapping[EvaluationContext, Iterable[Record]]) -> RunSummary:
        """
        Evaluate every stream and return a summary.

        Errors raised by a context (accumulation failures, finalization
        errors) are re-raised once all other contexts have finished.
        """
        chains = self._build_chains(streams.keys())
        outcomes: Dict[EvaluationContext, ContextOutcome] = {}
        errors: List[BaseException] = []

        logger.info("Starting validation run", contexts=[str(c) for c in chains], workers=self.max_workers)

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self._run_context, chain, streams[context]): context
                for context, chain in chains.items()
            }
            for future in as_completed(futures):
                context = futures[future]
                try:
                    outcomes[context] = future.result()
                except Exception as e:
                    logger.error("Context evaluation failed", context=str(context), error=str(e))
                    chain = chains[context]
                    outcomes[context] = ContextOutcome(
                        context=context,
                        records_processed=chain.records_processed,
                        criterion_failures=chain.criterion_failures,
                        degraded_criteria=list(chain.degraded_criteria),
                        error=str(e),
                    )
                    errors.append(e)

        summary = RunSummary(
            validation_results=self.accumulator.get_validation_result_count(),
            aggregation_results=self.accumulator.get_aggregation_result_count(),
            outcomes=outcomes,
        )
        logger.info(
            "Validation run complete",
            records=summary.records_processed,
            validation_results=summary.validation_results,
            aggregation_results=summary.aggregation_results,
            degraded_contexts=[str(c) for c in summary.degraded_contexts],
        )

        if errors:
            raise errors[0]
        return summary
