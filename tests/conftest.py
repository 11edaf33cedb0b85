"""
Test configuration and shared fixtures for the validator test suite.
"""

import pytest

from dwca_validator.config import Settings
from dwca_validator.record import Record
from dwca_validator.result.accumulator import InMemoryResultAccumulator
from dwca_validator.result.types import EvaluationContext


@pytest.fixture
def make_record():
    """Factory for records: make_record("1", decimalLatitude="10")"""
    def _make(record_id: str, row_type: str = "Occurrence", **values: str) -> Record:
        return Record(id=record_id, row_type=row_type, values=values)
    return _make


@pytest.fixture
def core_context() -> EvaluationContext:
    return EvaluationContext.core()


@pytest.fixture
def accumulator():
    acc = InMemoryResultAccumulator()
    yield acc
    acc.close()


@pytest.fixture
def temp_dir(tmp_path):
    spill_dir = tmp_path / "spill"
    spill_dir.mkdir()
    return spill_dir


@pytest.fixture
def test_settings(temp_dir) -> Settings:
    """Settings with temp files under tmp_path and a tiny spill buffer"""
    return Settings(temp_dir=str(temp_dir), uniqueness_buffer_threshold=2, sort_chunk_size=3)
