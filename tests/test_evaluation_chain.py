"""Tests for the evaluation chain"""

import os
from typing import Optional

import pytest

from dwca_validator.chain import EvaluationChain
from dwca_validator.criteria.base import RecordCriterion
from dwca_validator.criteria.completeness import CompletenessCriterion, CompletenessCriterionConfiguration
from dwca_validator.criteria.numeric_range import NumericRangeCriterion
from dwca_validator.criteria.record_count import RecordCountCriterion
from dwca_validator.criteria.transformations import NotBlankTransformation
from dwca_validator.criteria.uniqueness import UniquenessCriterion
from dwca_validator.exceptions import ChainStateError, CriterionConfigurationError, ResultAccumulationError
from dwca_validator.result.accumulator import InMemoryResultAccumulator
from dwca_validator.result.types import EvaluationContext, ValidationResult


class ExplodingCriterion(RecordCriterion):
    key = "exploding"

    def validate(self, record, context) -> Optional[ValidationResult]:
        raise RuntimeError("boom")


class RecordingCriterion(RecordCriterion):
    def __init__(self, key, calls):
        self.key = key
        self.calls = calls

    def validate(self, record, context) -> Optional[ValidationResult]:
        self.calls.append(self.key)
        return ValidationResult(record.id, context, record.row_type)


def _completeness():
    return CompletenessCriterion(CompletenessCriterionConfiguration(
        value_transformations=[NotBlankTransformation("scientificName")]
    ))


def test_results_follow_criterion_order(make_record, core_context, accumulator):
    calls = []
    chain = EvaluationChain(
        core_context,
        [RecordingCriterion("first", calls), RecordingCriterion("second", calls)],
        [],
        accumulator,
    )

    chain.process(make_record("1"))
    chain.process(make_record("2"))

    assert calls == ["first", "second", "first", "second"]
    assert [r.record_id for r in accumulator.validation_results] == ["1", "1", "2", "2"]


def test_failing_criterion_is_isolated(make_record, core_context, accumulator):
    chain = EvaluationChain(core_context, [ExplodingCriterion(), _completeness()], [], accumulator)

    chain.process(make_record("1", scientificName="Puma concolor"))

    assert chain.criterion_failures == 1
    assert accumulator.get_validation_result_count() == 1
    assert accumulator.validation_results[0].passed


def test_absent_results_are_not_accumulated(make_record, core_context, accumulator):
    chain = EvaluationChain(core_context, [NumericRangeCriterion()], [], accumulator)

    chain.process(make_record("1", decimalLatitude="10", decimalLongitude="10"))
    chain.process(make_record("2", decimalLatitude="100", decimalLongitude="10"))

    assert [r.record_id for r in accumulator.validation_results] == ["2"]


def test_same_record_twice_gives_two_results(make_record, core_context, accumulator):
    chain = EvaluationChain(core_context, [_completeness()], [], accumulator)
    record = make_record("1", scientificName="x")

    chain.process(record)
    chain.process(record)

    assert accumulator.get_validation_result_count() == 2


def test_end_of_stream_finalizes_then_evaluates(make_record, core_context, accumulator, test_settings, temp_dir):
    uniqueness = UniquenessCriterion(core_context, settings=test_settings)
    chain = EvaluationChain(
        core_context,
        [_completeness(), uniqueness],
        [RecordCountCriterion()],
        accumulator,
    )

    for record_id in ["1", "2", "1"]:
        chain.process(make_record(record_id, scientificName="x"))
    assert accumulator.get_validation_result_count() == 3

    chain.end_of_stream(core_context)

    assert accumulator.get_validation_result_count() == 4
    assert accumulator.validation_results[-1].record_id == "1"
    (count,) = accumulator.aggregation_results
    assert count.key == "record_count"
    assert count.value == 3
    assert not chain.degraded
    assert os.listdir(temp_dir) == []


def test_end_of_stream_exactly_once(make_record, core_context, accumulator):
    chain = EvaluationChain(core_context, [_completeness()], [], accumulator)
    chain.end_of_stream()

    with pytest.raises(ChainStateError):
        chain.end_of_stream()
    with pytest.raises(ChainStateError):
        chain.process(make_record("1"))


def test_end_of_stream_for_other_context_is_refused(core_context, accumulator):
    chain = EvaluationChain(core_context, [], [RecordCountCriterion()], accumulator)

    with pytest.raises(ChainStateError):
        chain.end_of_stream(EvaluationContext.extension("Taxon"))


def test_degraded_uniqueness_is_reported(make_record, core_context, accumulator, test_settings, monkeypatch):
    def failing_sort(*args, **kwargs):
        raise OSError("no space left on device")

    monkeypatch.setattr("dwca_validator.criteria.uniqueness.external_sort", failing_sort)
    chain = EvaluationChain(
        core_context,
        [UniquenessCriterion(core_context, settings=test_settings)],
        [RecordCountCriterion()],
        accumulator,
    )
    chain.process(make_record("1"))
    chain.end_of_stream()

    assert chain.degraded_criteria == ["uniqueness"]
    assert [a.key for a in accumulator.aggregation_results] == ["uniqueness.degraded", "record_count"]


def test_closed_accumulator_is_reported_to_caller(make_record, core_context):
    accumulator = InMemoryResultAccumulator()
    chain = EvaluationChain(core_context, [_completeness()], [], accumulator)
    accumulator.close()

    with pytest.raises(ResultAccumulationError):
        chain.process(make_record("1", scientificName="x"))


def test_duplicate_keys_are_rejected(core_context, accumulator):
    with pytest.raises(CriterionConfigurationError):
        EvaluationChain(core_context, [_completeness(), _completeness()], [], accumulator)
    with pytest.raises(CriterionConfigurationError):
        EvaluationChain(
            core_context, [], [RecordCountCriterion(), RecordCountCriterion()], accumulator
        )


def test_context_and_accumulator_are_required(core_context, accumulator):
    with pytest.raises(CriterionConfigurationError):
        EvaluationChain(None, [], [], accumulator)
    with pytest.raises(CriterionConfigurationError):
        EvaluationChain(core_context, [], [], None)


def test_aborted_chain_removes_temp_files(make_record, core_context, accumulator, test_settings, temp_dir):
    with pytest.raises(RuntimeError):
        with EvaluationChain(
            core_context, [UniquenessCriterion(core_context, settings=test_settings)], [], accumulator
        ) as chain:
            for i in range(5):
                chain.process(make_record(str(i)))
            raise RuntimeError("run aborted")

    assert os.listdir(temp_dir) == []
